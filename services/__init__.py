from .exceptions import (
     ReservationError,
     NotFoundError,
     PropertyNotAvailableError,
     SelfRequestForbiddenError,
     DuplicatePendingRequestError,
     ForbiddenError,
     InvalidStateTransitionError,
     InvalidArgumentError,
     TransientError,
     IntegrityViolationError,
)
from .reservation_service import ReservationService
from .property_service import PropertyService
from .notification_service import NotificationDispatcher, ExpoPushClient

__all__ = [
     "ReservationError",
     "NotFoundError",
     "PropertyNotAvailableError",
     "SelfRequestForbiddenError",
     "DuplicatePendingRequestError",
     "ForbiddenError",
     "InvalidStateTransitionError",
     "InvalidArgumentError",
     "TransientError",
     "IntegrityViolationError",
     "ReservationService",
     "PropertyService",
     "NotificationDispatcher",
     "ExpoPushClient",
]
