from .errors import register_error_handlers
from .profiles import router as profiles_router
from .properties import router as properties_router
from .properties import likes_router
from .requests import router as requests_router

__all__ = [
     "register_error_handlers",
     "profiles_router",
     "properties_router",
     "likes_router",
     "requests_router",
]
