import enum

from sqlalchemy import (
     JSON,
     CheckConstraint,
     Column,
     Enum,
     ForeignKey,
     Index,
     Integer,
     Numeric,
     String,
     Text,
)
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class PropertyStatus(str, enum.Enum):
     """
     Listing availability.

     Only the reservation service moves a property between AVAILABLE,
     REQUESTED and SOLD. WITHDRAWN is reserved for seller-initiated removal.
     """
     AVAILABLE = "available"
     REQUESTED = "requested"
     SOLD = "sold"
     WITHDRAWN = "withdrawn"


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
     """
     Property model - a listing owned by a seller.
     """
     __tablename__ = "properties"

     seller_id = Column(
          String(36),
          ForeignKey("profiles.id", ondelete="CASCADE"),
          nullable=False,
          index=True,
     )

     # Listing details
     title = Column(String(255), nullable=False)
     description = Column(Text, nullable=True)
     price = Column(Numeric(12, 2), nullable=False)
     property_type = Column(String(50), default="house", nullable=False)

     # Address
     address = Column(String(255), nullable=False)
     city = Column(String(100), nullable=False, index=True)
     state = Column(String(100), nullable=False)
     zip_code = Column(String(20), nullable=False)

     # Counts and measurements
     bedrooms = Column(Integer, default=0, nullable=False)
     bathrooms = Column(Numeric(3, 1), default=0, nullable=False)
     square_feet = Column(Integer, nullable=True)
     lot_size = Column(Numeric(10, 2), nullable=True)
     year_built = Column(Integer, nullable=True)
     amenities = Column(JSON, default=list, nullable=False)

     status = Column(
          Enum(
               PropertyStatus,
               name="property_status",
               create_constraint=True,
               values_callable=lambda e: [member.value for member in e],
          ),
          default=PropertyStatus.AVAILABLE,
          nullable=False,
          index=True,
     )

     # Relationships
     seller = relationship("Profile", back_populates="properties")
     images = relationship(
          "PropertyImage",
          back_populates="property",
          cascade="all, delete-orphan",
          order_by="PropertyImage.display_order",
     )
     requests = relationship("PropertyRequest", back_populates="property")
     history = relationship("PropertyHistory", back_populates="property", order_by="PropertyHistory.id")

     __table_args__ = (
          CheckConstraint("price > 0", name="ck_properties_price_positive"),
          CheckConstraint("bedrooms >= 0", name="ck_properties_bedrooms_non_negative"),
          CheckConstraint("bathrooms >= 0", name="ck_properties_bathrooms_non_negative"),
          Index("ix_properties_seller_status", "seller_id", "status"),
     )

     def __repr__(self):
          return f"<Property(id={self.id}, title='{self.title}', status='{self.status.value}')>"

     @property
     def is_available(self) -> bool:
          return self.status == PropertyStatus.AVAILABLE
