"""
Error taxonomy for the reservation service.

Every error raised by a reservation operation is a ReservationError subclass
with a stable ``code``. They are expected, recoverable outcomes: the
transaction that raised them has been rolled back with no partial writes.
TransientError is the only kind worth retrying.
"""
from typing import Any, Optional


class ReservationError(Exception):
     """Base class for typed reservation outcomes."""

     code = "RESERVATION_ERROR"
     retryable = False

     def __init__(self, message: str, **details: Any):
          super().__init__(message)
          self.message = message
          self.details = details


class NotFoundError(ReservationError):
     """Referenced property, request or profile does not exist."""

     code = "NOT_FOUND"

     def __init__(self, entity: str, entity_id: Any):
          super().__init__(f"{entity} {entity_id} not found", entity=entity, id=str(entity_id))


class PropertyNotAvailableError(ReservationError):
     """Property was not 'available' when its row was locked."""

     code = "PROPERTY_NOT_AVAILABLE"

     def __init__(self, property_id: Any, current_status: str):
          super().__init__(
               f"Property is not available (current status: {current_status})",
               property_id=str(property_id),
               current_status=current_status,
          )
          self.current_status = current_status


class SelfRequestForbiddenError(ReservationError):
     code = "SELF_REQUEST_FORBIDDEN"

     def __init__(self, property_id: Any):
          super().__init__("Sellers cannot request their own properties", property_id=str(property_id))


class DuplicatePendingRequestError(ReservationError):
     """Buyer already holds a pending request on another property."""

     code = "DUPLICATE_PENDING_REQUEST"

     def __init__(self, buyer_id: Any):
          super().__init__(
               "Buyer has an active pending request. Please wait for the current request to be processed.",
               buyer_id=str(buyer_id),
          )


class ForbiddenError(ReservationError):
     code = "FORBIDDEN"


class InvalidStateTransitionError(ReservationError):
     """Request was no longer pending when the transition was attempted."""

     code = "INVALID_STATE_TRANSITION"

     def __init__(self, message: str, current_status: Optional[str] = None):
          super().__init__(message, current_status=current_status)
          self.current_status = current_status


class InvalidArgumentError(ReservationError):
     code = "INVALID_ARGUMENT"


class TransientError(ReservationError):
     """Storage-layer fault (connectivity, lock timeout, deadlock victim)."""

     code = "TRANSIENT"
     retryable = True


class IntegrityViolationError(ReservationError):
     """A storage constraint rejected a write the service did not anticipate."""

     code = "INTEGRITY_VIOLATION"
