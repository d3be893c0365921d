"""
Property History Service - append-only audit trail of property status changes.

When the reservation service changes a property's status it records:
1. the acting profile and the action name
2. old_values / new_values snapshots ({"status": ..., "request_id": ...})
3. in the same transaction as the change, so history and state commit together

Verification: replay the entries in insertion order and compare the resulting
status with the property's current status; each entry's old status must also
match the previous entry's new status (the chain).
"""
from typing import Any, Optional, Tuple

from sqlalchemy.orm import Session

from models import Property, PropertyHistory, PropertyStatus
from services import entity_store

# Action names written to property_history.action
ACTION_CREATED = "created"
ACTION_REQUEST_CREATED = "request_created"
ACTION_REQUEST_CANCELLED = "request_cancelled"
ACTION_REQUEST_ACCEPTED = "request_accepted"
ACTION_REQUEST_DECLINED = "request_declined"


def _status_value(status: Any) -> Optional[str]:
     if status is None:
          return None
     return status.value if isinstance(status, PropertyStatus) else str(status)


def record_status_change(
     db: Session,
     property_id: str,
     actor_id: str,
     action: str,
     old_status: Optional[PropertyStatus],
     new_status: PropertyStatus,
     request_id: Optional[str] = None,
) -> PropertyHistory:
     """Append one status transition for a property."""
     old_values = {"status": _status_value(old_status)} if old_status is not None else None
     new_values: dict[str, Any] = {"status": _status_value(new_status)}
     if request_id is not None:
          new_values["request_id"] = request_id
     return entity_store.append_history(db, property_id, actor_id, action, old_values, new_values)


def get_property_history(db: Session, property_id: str) -> list[PropertyHistory]:
     """History entries for a property, oldest first."""
     return (
          db.query(PropertyHistory)
          .filter(PropertyHistory.property_id == property_id)
          .order_by(PropertyHistory.id)
          .all()
     )


def replay_property_status(db: Session, property_id: str) -> Optional[str]:
     """
     Rebuild a property's status from its history alone.

     Returns:
          The status produced by the last entry, or None if there is no history.
     """
     status = None
     for entry in get_property_history(db, property_id):
          new_status = (entry.new_values or {}).get("status")
          if new_status is not None:
               status = new_status
     return status


def verify_property_history(db: Session, property_id: str) -> Tuple[bool, str, int]:
     """
     Check the history chain of one property against its current status.

     Returns:
          (valid: bool, message: str, entries_checked: int)
     """
     prop = db.query(Property).filter(Property.id == property_id).first()
     if prop is None:
          return False, "Property not found", 0

     entries = get_property_history(db, property_id)
     if not entries:
          return False, "No history recorded", 0

     previous_status = None
     checked = 0
     for entry in entries:
          old_status = (entry.old_values or {}).get("status")
          if previous_status is not None and old_status != previous_status:
               return (
                    False,
                    f"Chain broken at id={entry.id}: old status {old_status!r} does not follow {previous_status!r}",
                    checked,
               )
          previous_status = (entry.new_values or {}).get("status", previous_status)
          checked += 1

     current = _status_value(prop.status)
     if previous_status != current:
          return False, f"Replayed status {previous_status!r} does not match current status {current!r}", checked

     return True, "History verification passed", checked
