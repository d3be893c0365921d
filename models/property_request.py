"""
PropertyRequest model - a buyer's request to purchase a listing.

Rows are created and mutated only by services.reservation_service and are
never deleted; they double as the permanent record of every reservation.
"""
import enum

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class RequestStatus(str, enum.Enum):
     """Request lifecycle. PENDING is the only non-terminal state."""
     PENDING = "pending"
     ACCEPTED = "accepted"
     DECLINED = "declined"
     CANCELLED = "cancelled"

     @property
     def is_terminal(self) -> bool:
          return self is not RequestStatus.PENDING


# Name of the partial unique index enforcing one pending request per buyer.
# services.entity_store matches on it to recognise the violation.
PENDING_PER_BUYER_INDEX = "uq_requests_buyer_pending"

_PENDING_ONLY = text("status = 'pending'")


class PropertyRequest(UUIDPrimaryKeyMixin, TimestampMixin, Base):
     """
     Request model - maps to the 'requests' table.
     """
     __tablename__ = "requests"

     buyer_id = Column(String(36), ForeignKey("profiles.id", ondelete="NO ACTION"), nullable=False)
     property_id = Column(
          String(36),
          ForeignKey("properties.id", ondelete="NO ACTION"),
          nullable=False,
          index=True,
     )
     # Copied from the property at creation time, never re-derived
     seller_id = Column(
          String(36),
          ForeignKey("profiles.id", ondelete="NO ACTION"),
          nullable=False,
          index=True,
     )
     message = Column(Text, nullable=True)
     status = Column(
          Enum(
               RequestStatus,
               name="request_status",
               create_constraint=True,
               values_callable=lambda e: [member.value for member in e],
          ),
          default=RequestStatus.PENDING,
          nullable=False,
          index=True,
     )

     # Relationships
     property = relationship("Property", back_populates="requests")
     buyer = relationship("Profile", foreign_keys=[buyer_id])
     seller = relationship("Profile", foreign_keys=[seller_id])

     __table_args__ = (
          CheckConstraint("buyer_id <> seller_id", name="ck_requests_buyer_not_seller"),
          Index("ix_requests_buyer_status", "buyer_id", "status"),
          Index(
               PENDING_PER_BUYER_INDEX,
               "buyer_id",
               unique=True,
               postgresql_where=_PENDING_ONLY,
               sqlite_where=_PENDING_ONLY,
               mssql_where=_PENDING_ONLY,
          ),
     )

     def __repr__(self):
          return (
               f"<PropertyRequest(id={self.id}, buyer_id={self.buyer_id}, "
               f"property_id={self.property_id}, status='{self.status.value}')>"
          )
