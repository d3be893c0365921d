from .base import Base
from .profile import Profile, UserRole
from .property import Property, PropertyStatus
from .property_image import PropertyImage
from .like import Like
from .property_request import PropertyRequest, RequestStatus, PENDING_PER_BUYER_INDEX
from .property_history import PropertyHistory

__all__ = [
     "Base",
     "Profile",
     "UserRole",
     "Property",
     "PropertyStatus",
     "PropertyImage",
     "Like",
     "PropertyRequest",
     "RequestStatus",
     "PENDING_PER_BUYER_INDEX",
     "PropertyHistory",
]
