from .request import (
     RequestCreate,
     RequestCreated,
     RequestRespond,
     OperationResult,
     RequestResponse,
     RequestListResponse,
)
from .property import (
     PropertyCreate,
     PropertyUpdate,
     PropertyResponse,
     PropertyListResponse,
     PropertyImageResponse,
     HistoryEntryResponse,
     LikeResponse,
)
from .profile import ProfileCreate, ProfileResponse, PushTokenUpdate

__all__ = [
     "RequestCreate",
     "RequestCreated",
     "RequestRespond",
     "OperationResult",
     "RequestResponse",
     "RequestListResponse",
     "PropertyCreate",
     "PropertyUpdate",
     "PropertyResponse",
     "PropertyListResponse",
     "PropertyImageResponse",
     "HistoryEntryResponse",
     "LikeResponse",
     "ProfileCreate",
     "ProfileResponse",
     "PushTokenUpdate",
]
