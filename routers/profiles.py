# routers/profiles.py
"""
Profile API routes.

A profile's id is the "id" claim of the caller's token, so callers create and
edit only their own profile.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_caller_id
from models import Profile
from schemas.profile import ProfileCreate, ProfileResponse, PushTokenUpdate
from services.exceptions import InvalidArgumentError, NotFoundError
from services.notification_service import is_valid_expo_push_token

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


def _get_profile(db: Session, profile_id: str) -> Profile:
     profile = db.query(Profile).filter(Profile.id == profile_id).first()
     if profile is None:
          raise NotFoundError("Profile", profile_id)
     return profile


@router.post(
     "",
     response_model=ProfileResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create or update the caller's profile"
)
def upsert_profile(
     profile_data: ProfileCreate,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     profile = db.query(Profile).filter(Profile.id == caller_id).first()
     if profile is None:
          profile = Profile(id=caller_id)
          db.add(profile)

     profile.full_name = profile_data.full_name
     profile.phone = profile_data.phone
     profile.role = profile_data.role
     db.flush()
     db.refresh(profile)
     return ProfileResponse.model_validate(profile)


@router.get("/me", response_model=ProfileResponse, summary="Get the caller's profile")
def get_my_profile(
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     return ProfileResponse.model_validate(_get_profile(db, caller_id))


@router.put("/me/push-token", summary="Register or clear the caller's Expo push token")
def update_push_token(
     body: PushTokenUpdate,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     """Send null to stop push notifications."""
     token = body.expo_push_token
     if token is not None and not is_valid_expo_push_token(token):
          raise InvalidArgumentError("Invalid Expo push token format")

     profile = _get_profile(db, caller_id)
     profile.expo_push_token = token
     return {"success": True}


@router.get("/{profile_id}", response_model=ProfileResponse, summary="Get a profile by ID")
def get_profile(
     profile_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     return ProfileResponse.model_validate(_get_profile(db, profile_id))
