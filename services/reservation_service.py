"""
Reservation Service - the request lifecycle state machine.

                create_request              respond_to_request(accepted)
     (none) ─────────────────▶ pending ─────────────────────────────▶ accepted
                                 │   ╲
                    cancel_request    respond_to_request(declined)
                                 ▼     ╲
                            cancelled   declined

Property status follows the request:
     available → requested   on create
     requested → sold        on accept
     requested → available   on cancel or decline

Each operation runs in one transaction: lock rows, validate, write, commit.
Any ReservationError raised inside rolls the whole transaction back.
Concurrent create_request calls on the same property are serialized by the
property row lock; concurrent cancel/respond calls on the same request are
serialized by the request row lock, and the loser sees a non-pending status.
The one-pending-request-per-buyer rule is left to the partial unique index
because two requests for different properties never contend for one lock.

The seller notification is published only after commit and can never change
the outcome of create_request.
"""
from contextlib import contextmanager
from typing import Callable, Generator, Optional, Union

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from database import get_session_context
from logging_config import get_logger
from models import PropertyRequest, PropertyStatus, RequestStatus
from services import entity_store, history_service
from services.exceptions import (
     DuplicatePendingRequestError,
     ForbiddenError,
     InvalidArgumentError,
     IntegrityViolationError,
     InvalidStateTransitionError,
     NotFoundError,
     PropertyNotAvailableError,
     SelfRequestForbiddenError,
     TransientError,
)

logger = get_logger(__name__)

ALLOWED_DECISIONS = (RequestStatus.ACCEPTED, RequestStatus.DECLINED)

# Property status after each seller decision
_PROPERTY_STATUS_FOR_DECISION = {
     RequestStatus.ACCEPTED: PropertyStatus.SOLD,
     RequestStatus.DECLINED: PropertyStatus.AVAILABLE,
}

_HISTORY_ACTION_FOR_DECISION = {
     RequestStatus.ACCEPTED: history_service.ACTION_REQUEST_ACCEPTED,
     RequestStatus.DECLINED: history_service.ACTION_REQUEST_DECLINED,
}


def parse_decision(decision: Union[str, RequestStatus, None]) -> RequestStatus:
     """
     Validate a seller decision.

     Raises:
          InvalidArgumentError: decision is not 'accepted' or 'declined'
     """
     try:
          status = RequestStatus(decision)
     except (ValueError, TypeError):
          status = None
     if status not in ALLOWED_DECISIONS:
          raise InvalidArgumentError(
               "Invalid response. Must be accepted or declined",
               decision=str(decision),
          )
     return status


class ReservationService:
     """
     Transactional create/cancel/respond operations.

     Args:
          session_factory: Callable returning a new Session (defaults to database.SessionLocal)
          dispatcher: Object with publish(request_id); receives committed requests
     """

     def __init__(self, session_factory: Optional[Callable[[], Session]] = None, dispatcher=None):
          self.session_factory = session_factory
          self.dispatcher = dispatcher

     @contextmanager
     def _transaction(self) -> Generator[Session, None, None]:
          """One unit of work; storage faults surface as TransientError."""
          try:
               with get_session_context(self.session_factory) as db:
                    yield db
          except IntegrityError as exc:
               # Known violations were already translated by entity_store
               logger.error("Unexpected constraint violation during reservation transaction: %s", exc.orig)
               raise IntegrityViolationError("The change was rejected by a storage constraint") from exc
          except (DBAPIError, PoolTimeoutError) as exc:
               logger.warning("Storage fault during reservation transaction: %s", exc)
               raise TransientError("Storage temporarily unavailable, please retry") from exc

     def create_request(self, buyer_id: str, property_id: str, message: Optional[str] = None) -> str:
          """
          Reserve an available property for a buyer.

          Returns:
               The new request id

          Raises:
               NotFoundError, PropertyNotAvailableError, SelfRequestForbiddenError,
               DuplicatePendingRequestError, TransientError
          """
          with self._transaction() as db:
               prop = entity_store.lock_property_for_update(db, property_id)
               if prop is None:
                    raise NotFoundError("Property", property_id)

               if prop.status != PropertyStatus.AVAILABLE:
                    raise PropertyNotAvailableError(property_id, prop.status.value)

               if prop.seller_id == buyer_id:
                    raise SelfRequestForbiddenError(property_id)

               try:
                    request_id = entity_store.insert_request(
                         db, buyer_id, property_id, prop.seller_id, message
                    )
               except entity_store.DuplicatePendingForBuyer as exc:
                    raise DuplicatePendingRequestError(buyer_id) from exc

               entity_store.update_property_status(db, property_id, PropertyStatus.REQUESTED)
               history_service.record_status_change(
                    db,
                    property_id,
                    buyer_id,
                    history_service.ACTION_REQUEST_CREATED,
                    PropertyStatus.AVAILABLE,
                    PropertyStatus.REQUESTED,
                    request_id=request_id,
               )

          logger.info("Request %s created by buyer %s for property %s", request_id, buyer_id, property_id)
          self._notify_request_created(request_id)
          return request_id

     def cancel_request(self, request_id: str, caller_id: str) -> bool:
          """
          Buyer withdraws a pending request; the property becomes available again.

          Raises:
               NotFoundError, ForbiddenError, InvalidStateTransitionError, TransientError
          """
          with self._transaction() as db:
               request = entity_store.lock_request_for_update(db, request_id)
               if request is None:
                    raise NotFoundError("Request", request_id)

               if request.buyer_id != caller_id:
                    raise ForbiddenError("Only the buyer can cancel their request", request_id=request_id)

               if request.status != RequestStatus.PENDING:
                    raise InvalidStateTransitionError(
                         f"Only pending requests can be cancelled (current status: {request.status.value})",
                         current_status=request.status.value,
                    )

               self._transition(
                    db,
                    request,
                    caller_id,
                    RequestStatus.CANCELLED,
                    PropertyStatus.AVAILABLE,
                    history_service.ACTION_REQUEST_CANCELLED,
               )

          logger.info("Request %s cancelled by buyer %s", request_id, caller_id)
          return True

     def respond_to_request(
          self,
          request_id: str,
          caller_id: str,
          decision: Union[str, RequestStatus],
     ) -> bool:
          """
          Seller accepts (property sold) or declines (property available) a pending request.

          The decision is validated before any lock is taken.

          Raises:
               InvalidArgumentError, NotFoundError, ForbiddenError,
               InvalidStateTransitionError, TransientError
          """
          new_status = parse_decision(decision)

          with self._transaction() as db:
               request = entity_store.lock_request_for_update(db, request_id)
               if request is None:
                    raise NotFoundError("Request", request_id)

               if request.seller_id != caller_id:
                    raise ForbiddenError("Only the seller can respond to this request", request_id=request_id)

               if request.status != RequestStatus.PENDING:
                    raise InvalidStateTransitionError(
                         f"Only pending requests can be responded to (current status: {request.status.value})",
                         current_status=request.status.value,
                    )

               self._transition(
                    db,
                    request,
                    caller_id,
                    new_status,
                    _PROPERTY_STATUS_FOR_DECISION[new_status],
                    _HISTORY_ACTION_FOR_DECISION[new_status],
               )

          logger.info("Request %s %s by seller %s", request_id, new_status.value, caller_id)
          return True

     @staticmethod
     def _transition(
          db: Session,
          request: PropertyRequest,
          actor_id: str,
          new_request_status: RequestStatus,
          new_property_status: PropertyStatus,
          action: str,
     ) -> None:
          """Apply a validated request transition and its property side effect."""
          # Lock order is always request, then property
          prop = entity_store.lock_property_for_update(db, request.property_id)
          old_property_status = prop.status if prop is not None else None

          entity_store.update_request_status(db, request.id, new_request_status)
          entity_store.update_property_status(db, request.property_id, new_property_status)
          history_service.record_status_change(
               db,
               request.property_id,
               actor_id,
               action,
               old_property_status,
               new_property_status,
               request_id=request.id,
          )

     def _notify_request_created(self, request_id: str) -> None:
          if self.dispatcher is None:
               return
          try:
               self.dispatcher.publish(request_id)
          except Exception:
               # The reservation is committed; a lost notification must not fail it
               logger.exception("Could not publish notification for request %s", request_id)


# ---------------------------------------------------------------------------
# Read helpers (no locks)
# ---------------------------------------------------------------------------

def get_request_for_party(db: Session, request_id: str, caller_id: str) -> PropertyRequest:
     """
     Fetch a request visible to the caller (its buyer or seller).

     Raises:
          NotFoundError, ForbiddenError
     """
     request = db.query(PropertyRequest).filter(PropertyRequest.id == request_id).first()
     if request is None:
          raise NotFoundError("Request", request_id)
     if caller_id not in (request.buyer_id, request.seller_id):
          raise ForbiddenError("You do not have permission to view this request", request_id=request_id)
     return request


def find_active_request(db: Session, buyer_id: str) -> Optional[PropertyRequest]:
     """The buyer's single pending request, if any."""
     return (
          db.query(PropertyRequest)
          .filter(
               PropertyRequest.buyer_id == buyer_id,
               PropertyRequest.status == RequestStatus.PENDING,
          )
          .one_or_none()
     )


def list_requests_for_buyer(db: Session, buyer_id: str) -> list[PropertyRequest]:
     return (
          db.query(PropertyRequest)
          .filter(PropertyRequest.buyer_id == buyer_id)
          .order_by(PropertyRequest.created_at.desc())
          .all()
     )


def list_requests_for_seller(
     db: Session,
     seller_id: str,
     status: Optional[RequestStatus] = None,
) -> list[PropertyRequest]:
     query = db.query(PropertyRequest).filter(PropertyRequest.seller_id == seller_id)
     if status is not None:
          query = query.filter(PropertyRequest.status == status)
     return query.order_by(PropertyRequest.created_at.desc()).all()
