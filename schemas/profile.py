"""
Pydantic schemas for profile endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models import UserRole


class ProfileCreate(BaseModel):
     full_name: str = Field(..., min_length=1, max_length=255)
     phone: Optional[str] = Field(None, max_length=50)
     role: UserRole = UserRole.BUYER


class ProfileResponse(BaseModel):
     id: str
     full_name: str
     phone: Optional[str] = None
     role: UserRole
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class PushTokenUpdate(BaseModel):
     """Expo push token, e.g. ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]."""
     expo_push_token: Optional[str] = Field(None, max_length=255)
