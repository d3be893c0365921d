"""
Profile model - buyer/seller identity and contact details.

The reservation core reads profiles by id only; it never writes to them.
"""
import enum

from sqlalchemy import Column, Enum, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class UserRole(str, enum.Enum):
     """Marketplace role. BOTH is reserved; roles do not change authorization."""
     BUYER = "buyer"
     SELLER = "seller"
     BOTH = "both"


class Profile(UUIDPrimaryKeyMixin, TimestampMixin, Base):
     """
     Profile model - one row per authenticated user.
     The id matches the subject id carried in the bearer token.
     """
     __tablename__ = "profiles"

     full_name = Column(String(255), nullable=False)
     phone = Column(String(50), nullable=True)
     role = Column(
          Enum(
               UserRole,
               name="user_role",
               create_constraint=True,
               values_callable=lambda e: [member.value for member in e],
          ),
          default=UserRole.BUYER,
          nullable=False,
     )
     expo_push_token = Column(Text, nullable=True)  # contact token for push delivery

     # Relationships
     properties = relationship("Property", back_populates="seller")

     __table_args__ = (
          Index("ix_profiles_role", "role"),
     )

     @property
     def display_name(self) -> str:
          return self.full_name

     def __repr__(self):
          return f"<Profile(id={self.id}, name='{self.full_name}', role='{self.role.value}')>"
