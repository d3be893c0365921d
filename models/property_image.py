from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from .base import Base, UUIDPrimaryKeyMixin


class PropertyImage(UUIDPrimaryKeyMixin, Base):
     """
     PropertyImage model - opaque blob-store URLs attached to a listing.
     """
     __tablename__ = "property_images"

     property_id = Column(
          String(36),
          ForeignKey("properties.id", ondelete="CASCADE"),
          nullable=False,
          index=True,
     )
     image_url = Column(Text, nullable=False)
     display_order = Column(Integer, default=0, nullable=False)
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     property = relationship("Property", back_populates="images")

     def __repr__(self):
          return f"<PropertyImage(id={self.id}, property_id={self.property_id}, order={self.display_order})>"
