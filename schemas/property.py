"""
Pydantic schemas for property listing API request/response validation.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import PropertyStatus


class PropertyCreate(BaseModel):
     """Schema for listing a new property. Status is always 'available'."""
     title: str = Field(..., min_length=1, max_length=255)
     description: Optional[str] = None
     price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
     property_type: str = Field("house", max_length=50)
     address: str = Field(..., min_length=1, max_length=255)
     city: str = Field(..., min_length=1, max_length=100)
     state: str = Field(..., min_length=1, max_length=100)
     zip_code: str = Field(..., min_length=1, max_length=20)
     bedrooms: int = Field(0, ge=0)
     bathrooms: Decimal = Field(Decimal("0"), ge=0, max_digits=3, decimal_places=1)
     square_feet: Optional[int] = Field(None, gt=0)
     lot_size: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
     year_built: Optional[int] = Field(None, ge=1800)
     amenities: List[str] = Field(default_factory=list)

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "title": "Sunny 3BR Bungalow",
                    "price": 450000.00,
                    "address": "12 Oak Street",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "bedrooms": 3,
                    "bathrooms": 2.0,
                    "amenities": ["garage", "garden"],
               }
          }
     )


class PropertyUpdate(BaseModel):
     """Schema for editing listing details. There is intentionally no status field."""
     title: Optional[str] = Field(None, min_length=1, max_length=255)
     description: Optional[str] = None
     price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
     property_type: Optional[str] = Field(None, max_length=50)
     address: Optional[str] = Field(None, min_length=1, max_length=255)
     city: Optional[str] = Field(None, min_length=1, max_length=100)
     state: Optional[str] = Field(None, min_length=1, max_length=100)
     zip_code: Optional[str] = Field(None, min_length=1, max_length=20)
     bedrooms: Optional[int] = Field(None, ge=0)
     bathrooms: Optional[Decimal] = Field(None, ge=0, max_digits=3, decimal_places=1)
     square_feet: Optional[int] = Field(None, gt=0)
     lot_size: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
     year_built: Optional[int] = Field(None, ge=1800)
     amenities: Optional[List[str]] = None


class PropertyImageResponse(BaseModel):
     id: str
     image_url: str
     display_order: int

     model_config = ConfigDict(from_attributes=True)


class PropertyResponse(BaseModel):
     """Schema for property response."""
     id: str
     seller_id: str
     title: str
     description: Optional[str] = None
     price: Decimal
     property_type: str
     address: str
     city: str
     state: str
     zip_code: str
     bedrooms: int
     bathrooms: Decimal
     square_feet: Optional[int] = None
     lot_size: Optional[Decimal] = None
     year_built: Optional[int] = None
     amenities: List[str] = Field(default_factory=list)
     status: PropertyStatus
     created_at: datetime
     updated_at: datetime
     images: List[PropertyImageResponse] = Field(default_factory=list)

     model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
     """Schema for paginated property list response."""
     properties: List[PropertyResponse]
     total: int
     page: int = 1
     page_size: int = 50


class HistoryEntryResponse(BaseModel):
     id: int
     user_id: str
     action: str
     old_values: Optional[dict] = None
     new_values: Optional[dict] = None
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class LikeResponse(BaseModel):
     id: str
     property_id: str
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)
