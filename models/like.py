from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from .base import Base, UUIDPrimaryKeyMixin


class Like(UUIDPrimaryKeyMixin, Base):
     """Like model - a user's saved/favourite property."""
     __tablename__ = "likes"

     user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
     property_id = Column(
          String(36),
          ForeignKey("properties.id", ondelete="NO ACTION"),
          nullable=False,
          index=True,
     )
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     property = relationship("Property")

     __table_args__ = (
          UniqueConstraint("user_id", "property_id", name="uq_likes_user_property"),
     )

     def __repr__(self):
          return f"<Like(user_id={self.user_id}, property_id={self.property_id})>"
