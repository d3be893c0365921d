"""
Property Service - listing CRUD around the reservation core.

Listings are created as 'available' and their descriptive fields may be
edited by the seller. Status is deliberately not writable here; only the
reservation service changes it.
"""
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Like, Profile, Property, PropertyImage, PropertyStatus
from services import history_service
from services.exceptions import ForbiddenError, NotFoundError

# Fields a seller may change after listing
EDITABLE_FIELDS = {
     "title",
     "description",
     "price",
     "property_type",
     "address",
     "city",
     "state",
     "zip_code",
     "bedrooms",
     "bathrooms",
     "square_feet",
     "lot_size",
     "year_built",
     "amenities",
}


class PropertyService:
     """Service class for listing-related business logic."""

     @staticmethod
     def get_property(db: Session, property_id: str) -> Property:
          prop = db.query(Property).filter(Property.id == property_id).first()
          if prop is None:
               raise NotFoundError("Property", property_id)
          return prop

     @staticmethod
     def get_owned_property(db: Session, property_id: str, seller_id: str) -> Property:
          prop = PropertyService.get_property(db, property_id)
          if prop.seller_id != seller_id:
               raise ForbiddenError("Only the seller can manage this property", property_id=property_id)
          return prop

     @staticmethod
     def create_property(db: Session, seller_id: str, data: dict[str, Any]) -> Property:
          """
          List a new property for a seller.

          The property always starts 'available' and its creation is the first
          history entry, so replaying history reproduces the current status.

          Raises:
               NotFoundError: If the seller profile doesn't exist
          """
          seller = db.query(Profile).filter(Profile.id == seller_id).first()
          if seller is None:
               raise NotFoundError("Profile", seller_id)

          fields = {key: value for key, value in data.items() if key in EDITABLE_FIELDS}
          prop = Property(seller_id=seller_id, status=PropertyStatus.AVAILABLE, **fields)
          db.add(prop)
          db.flush()  # Flush to get the ID without committing

          history_service.record_status_change(
               db,
               prop.id,
               seller_id,
               history_service.ACTION_CREATED,
               None,
               PropertyStatus.AVAILABLE,
          )
          return prop

     @staticmethod
     def update_property_details(
          db: Session,
          property_id: str,
          seller_id: str,
          updates: dict[str, Any],
     ) -> Property:
          """Apply seller edits to descriptive fields. Unknown keys, including status, are ignored."""
          prop = PropertyService.get_owned_property(db, property_id, seller_id)
          for key, value in updates.items():
               if key in EDITABLE_FIELDS:
                    setattr(prop, key, value)
          db.flush()
          return prop

     @staticmethod
     def list_properties(
          db: Session,
          status: Optional[PropertyStatus] = PropertyStatus.AVAILABLE,
          seller_id: Optional[str] = None,
          city: Optional[str] = None,
          page: int = 1,
          page_size: int = 50,
     ) -> tuple[list[Property], int]:
          """
          Filtered, paginated listing query.

          Returns:
               (properties, total)
          """
          query = db.query(Property)
          if seller_id:
               query = query.filter(Property.seller_id == seller_id)
          if status is not None:
               query = query.filter(Property.status == status)
          if city:
               query = query.filter(Property.city == city)

          total = query.count()
          offset = (page - 1) * page_size
          properties = query.order_by(Property.created_at.desc()).offset(offset).limit(page_size).all()
          return properties, total

     @staticmethod
     def add_image(db: Session, property_id: str, seller_id: str, image_url: str) -> PropertyImage:
          prop = PropertyService.get_owned_property(db, property_id, seller_id)
          image = PropertyImage(
               property_id=prop.id,
               image_url=image_url,
               display_order=len(prop.images),
          )
          db.add(image)
          db.flush()
          return image

     @staticmethod
     def like_property(db: Session, property_id: str, user_id: str) -> Like:
          """Save a property for a user. Liking twice returns the existing like."""
          PropertyService.get_property(db, property_id)
          existing = (
               db.query(Like)
               .filter(Like.user_id == user_id, Like.property_id == property_id)
               .first()
          )
          if existing:
               return existing

          like = Like(user_id=user_id, property_id=property_id)
          db.add(like)
          try:
               db.flush()
          except IntegrityError as exc:
               if "foreign key" in str(exc.orig).lower():
                    raise NotFoundError("Profile", user_id) from exc
               raise
          return like

     @staticmethod
     def unlike_property(db: Session, property_id: str, user_id: str) -> bool:
          deleted = (
               db.query(Like)
               .filter(Like.user_id == user_id, Like.property_id == property_id)
               .delete(synchronize_session=False)
          )
          return deleted > 0

     @staticmethod
     def list_likes(db: Session, user_id: str) -> list[Like]:
          return db.query(Like).filter(Like.user_id == user_id).order_by(Like.created_at.desc()).all()

     @staticmethod
     def remove_image(db: Session, property_id: str, seller_id: str, image_id: str) -> PropertyImage:
          """Delete an image row; the caller removes the blob itself."""
          PropertyService.get_owned_property(db, property_id, seller_id)
          image = (
               db.query(PropertyImage)
               .filter(PropertyImage.id == image_id, PropertyImage.property_id == property_id)
               .first()
          )
          if image is None:
               raise NotFoundError("Image", image_id)
          db.delete(image)
          db.flush()
          return image
