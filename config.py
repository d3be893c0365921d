"""
Application configuration loaded from the environment.

Values come from process environment variables, optionally seeded from a
local .env file. Import constants from here instead of calling os.getenv
throughout the codebase.
"""
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
     return os.getenv(name, default).lower() == "true"


# Database
DB_SERVER = os.getenv("DB_SERVER")
DB_PORT = os.getenv("DB_PORT", "1433")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")
SQL_ECHO = _env_bool("SQL_ECHO")


def build_database_url() -> str:
     """
     Resolve the SQLAlchemy URL.

     DATABASE_URL wins when set (e.g. postgresql+psycopg://... or sqlite:///...),
     otherwise an MS SQL Server URL is assembled from the DB_* variables.
     """
     override = os.getenv("DATABASE_URL")
     if override:
          return override

     safe_user = quote_plus(DB_USER or "")
     safe_pass = quote_plus(DB_PASS or "")
     return f"mssql+pymssql://{safe_user}:{safe_pass}@{DB_SERVER}:{DB_PORT}/{DB_NAME}"


DATABASE_URL = build_database_url()

# Auth
JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = "HS256"

# HTTP
CORS_ORIGINS = [origin for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin]
PORT = int(os.getenv("PORT", 10000))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "standard")  # standard | json

# Requests
MAX_REQUEST_MESSAGE_LENGTH = int(os.getenv("MAX_REQUEST_MESSAGE_LENGTH", 1000))

# Push notifications
NOTIFICATIONS_ENABLED = _env_bool("NOTIFICATIONS_ENABLED", "true")
EXPO_PUSH_API = os.getenv("EXPO_PUSH_API", "https://exp.host/--/api/v2/push/send")
NOTIFY_MAX_RETRIES = int(os.getenv("NOTIFY_MAX_RETRIES", 3))
NOTIFY_RETRY_DELAY = float(os.getenv("NOTIFY_RETRY_DELAY", 1.0))  # seconds, multiplied by attempt
NOTIFY_TIMEOUT = float(os.getenv("NOTIFY_TIMEOUT", 10))
DEEP_LINK_PREFIX = os.getenv("DEEP_LINK_PREFIX", "myapp://")

# Blob storage
AZURE_STORAGE_ACCOUNT = os.getenv("AZURE_STORAGE_ACCOUNT")
AZURE_STORAGE_KEY = os.getenv("AZURE_STORAGE_KEY")
AZURE_IMAGE_CONTAINER = os.getenv("AZURE_IMAGE_CONTAINER", "property-images")
