# routers/properties.py
"""
Property listing API routes.

Listings are created 'available'. Sellers can edit descriptive fields and
attach images; status only changes through the request endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

import azure_blob
import config
from database import get_session
from dependencies import get_caller_id
from models import Property, PropertyStatus
from schemas.property import (
     HistoryEntryResponse,
     LikeResponse,
     PropertyCreate,
     PropertyImageResponse,
     PropertyListResponse,
     PropertyResponse,
     PropertyUpdate,
)
from services import history_service
from services.property_service import PropertyService

router = APIRouter(prefix="/api/properties", tags=["properties"])
likes_router = APIRouter(prefix="/api/likes", tags=["likes"])


def _build_property_response(prop: Property) -> PropertyResponse:
     return PropertyResponse.model_validate(prop)


@router.post(
     "",
     response_model=PropertyResponse,
     status_code=status.HTTP_201_CREATED,
     summary="List a new property"
)
def create_property(
     property_data: PropertyCreate,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     """
     Create a listing owned by the caller. The listing starts as **available**.
     """
     prop = PropertyService.create_property(db, caller_id, property_data.model_dump())
     db.refresh(prop)
     return _build_property_response(prop)


@router.get("", response_model=PropertyListResponse, summary="List properties with filters")
def list_properties(
     status: Optional[PropertyStatus] = Query(
          PropertyStatus.AVAILABLE, description="Filter by status (defaults to available)"
     ),
     seller_id: Optional[str] = Query(None, description="Filter by seller"),
     city: Optional[str] = Query(None, description="Filter by city"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(50, ge=1, le=100, description="Items per page"),
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     properties, total = PropertyService.list_properties(
          db,
          status=status,
          seller_id=seller_id,
          city=city,
          page=page,
          page_size=page_size,
     )
     return PropertyListResponse(
          properties=[_build_property_response(p) for p in properties],
          total=total,
          page=page,
          page_size=page_size,
     )


@router.get("/{property_id}", response_model=PropertyResponse, summary="Get a property by ID")
def get_property(
     property_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     return _build_property_response(PropertyService.get_property(db, property_id))


@router.patch("/{property_id}", response_model=PropertyResponse, summary="Edit listing details")
def update_property(
     property_id: str,
     property_data: PropertyUpdate,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     """
     Update descriptive fields of the caller's own listing.
     Only provided fields are changed; status cannot be edited here.
     """
     updates = property_data.model_dump(exclude_unset=True)
     prop = PropertyService.update_property_details(db, property_id, caller_id, updates)
     db.refresh(prop)
     return _build_property_response(prop)


@router.get(
     "/{property_id}/history",
     response_model=List[HistoryEntryResponse],
     summary="Status history of a property"
)
def get_property_history(
     property_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     PropertyService.get_owned_property(db, property_id, caller_id)
     entries = history_service.get_property_history(db, property_id)
     return [HistoryEntryResponse.model_validate(entry) for entry in entries]


@router.get("/{property_id}/history/verify", summary="Verify property history against current status")
def verify_property_history(
     property_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     """
     Replay the history chain and compare the result with the stored status.
     Returns verification result and number of entries checked.
     """
     PropertyService.get_property(db, property_id)
     valid, message, count = history_service.verify_property_history(db, property_id)
     return {
          "verified": valid,
          "message": message,
          "entries_checked": count,
     }


@router.post(
     "/{property_id}/images",
     response_model=PropertyImageResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Upload a listing image"
)
def upload_property_image(
     property_id: str,
     image: UploadFile = File(...),
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     PropertyService.get_owned_property(db, property_id, caller_id)
     image_url = azure_blob.upload_to_blob(image, config.AZURE_IMAGE_CONTAINER, property_id)
     record = PropertyService.add_image(db, property_id, caller_id, image_url)
     return PropertyImageResponse.model_validate(record)


@router.delete("/{property_id}/images/{image_id}", summary="Remove a listing image")
def delete_property_image(
     property_id: str,
     image_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     image = PropertyService.remove_image(db, property_id, caller_id, image_id)
     image_url = image.image_url
     # The blob goes only once the row deletion is durable
     db.commit()
     azure_blob.delete_from_blob(image_url)
     return {"success": True}


@router.post(
     "/{property_id}/like",
     response_model=LikeResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Save a property"
)
def like_property(
     property_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     like = PropertyService.like_property(db, property_id, caller_id)
     db.refresh(like)
     return LikeResponse.model_validate(like)


@router.delete("/{property_id}/like", summary="Remove a saved property")
def unlike_property(
     property_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     return {"success": PropertyService.unlike_property(db, property_id, caller_id)}


@likes_router.get("", response_model=List[LikeResponse], summary="List the caller's saved properties")
def list_likes(
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     return [LikeResponse.model_validate(like) for like in PropertyService.list_likes(db, caller_id)]
