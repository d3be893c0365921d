import re
import uuid

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, declared_attr


def new_id() -> str:
     """Primary keys are UUID4 strings so they are portable across dialects."""
     return str(uuid.uuid4())


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: PropertyImage -> property_images
          """
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'


class UUIDPrimaryKeyMixin:
     id = Column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
