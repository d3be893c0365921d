"""
Entity Store - row locking and constrained writes used by the reservation service.

Every function expects to run inside an open transaction on ``db`` and never
commits. Locks taken with lock_*_for_update are held until that transaction
commits or rolls back.

The buyer-level "one pending request" rule is enforced by the partial unique
index on requests(buyer_id) WHERE status = 'pending', not by a read-then-write
check here. insert_request surfaces that violation as DuplicatePendingForBuyer.
"""
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import (
     PENDING_PER_BUYER_INDEX,
     Property,
     PropertyHistory,
     PropertyRequest,
     PropertyStatus,
     RequestStatus,
)
from services.exceptions import NotFoundError


class DuplicatePendingForBuyer(Exception):
     """The insert collided with the buyer's existing pending request."""

     def __init__(self, buyer_id: str):
          super().__init__(f"Buyer {buyer_id} already has a pending request")
          self.buyer_id = buyer_id


def _is_pending_per_buyer_violation(exc: IntegrityError) -> bool:
     # PostgreSQL and SQL Server name the index in the message, SQLite names the column
     message = str(exc.orig)
     return PENDING_PER_BUYER_INDEX in message or "requests.buyer_id" in message


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
     message = str(exc.orig).lower()
     return "foreign key" in message


# SQL Server ignores FOR UPDATE; the table hint takes the update lock instead
MSSQL_LOCK_HINT = "WITH (UPDLOCK, ROWLOCK)"


def lock_for_update(query, entity):
     """
     Apply row-level locking for critical operations.

     Renders FOR UPDATE on PostgreSQL and a WITH (UPDLOCK, ROWLOCK) table hint
     on SQL Server; either lock is held until the transaction ends.

     NOTE: SQLite ignores SELECT ... FOR UPDATE; database.py serializes SQLite
     writers with BEGIN IMMEDIATE instead.
     """
     return query.with_for_update().with_hint(entity, MSSQL_LOCK_HINT, "mssql")


def property_lock_query(db: Session, property_id: str):
     return lock_for_update(db.query(Property).filter(Property.id == property_id), Property)


def request_lock_query(db: Session, request_id: str):
     return lock_for_update(
          db.query(PropertyRequest).filter(PropertyRequest.id == request_id),
          PropertyRequest,
     )


def lock_property_for_update(db: Session, property_id: str) -> Optional[Property]:
     """Lock one property row. Returns None when it does not exist."""
     return property_lock_query(db, property_id).one_or_none()


def lock_request_for_update(db: Session, request_id: str) -> Optional[PropertyRequest]:
     """Lock one request row. Returns None when it does not exist."""
     return request_lock_query(db, request_id).one_or_none()


def insert_request(
     db: Session,
     buyer_id: str,
     property_id: str,
     seller_id: str,
     message: Optional[str],
) -> str:
     """
     Insert a pending request and flush it so constraints fire immediately.

     Raises:
          DuplicatePendingForBuyer: buyer already has a pending request
          NotFoundError: buyer profile does not exist
     """
     request = PropertyRequest(
          buyer_id=buyer_id,
          property_id=property_id,
          seller_id=seller_id,
          message=message,
          status=RequestStatus.PENDING,
     )
     db.add(request)
     try:
          db.flush()
     except IntegrityError as exc:
          if _is_pending_per_buyer_violation(exc):
               raise DuplicatePendingForBuyer(buyer_id) from exc
          if _is_foreign_key_violation(exc):
               raise NotFoundError("Profile", buyer_id) from exc
          raise
     return request.id


def update_property_status(db: Session, property_id: str, new_status: PropertyStatus) -> None:
     db.query(Property).filter(Property.id == property_id).update(
          {Property.status: new_status},
          synchronize_session="fetch",
     )


def update_request_status(db: Session, request_id: str, new_status: RequestStatus) -> None:
     db.query(PropertyRequest).filter(PropertyRequest.id == request_id).update(
          {PropertyRequest.status: new_status},
          synchronize_session="fetch",
     )


def append_history(
     db: Session,
     property_id: str,
     actor_id: str,
     action: str,
     old_values: Optional[dict[str, Any]],
     new_values: Optional[dict[str, Any]],
) -> PropertyHistory:
     """
     Append an audit entry inside the current transaction.

     The flush makes a failing write abort the caller's transaction instead of
     surfacing later at commit.
     """
     entry = PropertyHistory(
          property_id=property_id,
          user_id=actor_id,
          action=action,
          old_values=old_values,
          new_values=new_values,
     )
     db.add(entry)
     db.flush()
     return entry
