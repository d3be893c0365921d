"""
PropertyHistory model - append-only audit trail of property status changes.

Each row records the old and new values of a transition together with the
acting profile. Rows are inserted in the same transaction as the change they
describe and are never updated or deleted.
"""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from .base import Base


class PropertyHistory(Base):
     """
     Audit entry. The integer id gives a strict per-database ordering,
     which history_service relies on when replaying.
     """
     __tablename__ = "property_history"

     id = Column(Integer, primary_key=True, autoincrement=True)
     property_id = Column(
          String(36),
          ForeignKey("properties.id", ondelete="NO ACTION"),
          nullable=False,
          index=True,
     )
     user_id = Column(String(36), ForeignKey("profiles.id", ondelete="NO ACTION"), nullable=False)
     action = Column(String(50), nullable=False)  # created, request_created, request_cancelled, ...
     old_values = Column(JSON, nullable=True)
     new_values = Column(JSON, nullable=True)
     created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

     # Relationships
     property = relationship("Property", back_populates="history")

     def __repr__(self):
          return f"<PropertyHistory(id={self.id}, property_id={self.property_id}, action='{self.action}')>"
