"""
Pydantic schemas for the request (reservation) API.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

import config
from models import RequestStatus


class RequestCreate(BaseModel):
     """Body for POST /api/requests. The buyer is the authenticated caller."""
     property_id: UUID = Field(..., description="Property to request")
     message: Optional[str] = Field(
          None,
          max_length=config.MAX_REQUEST_MESSAGE_LENGTH,
          description="Optional note to the seller",
     )

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "property_id": "660e8400-e29b-41d4-a716-446655440001",
                    "message": "I am interested in viewing this property",
               }
          }
     )


class RequestCreated(BaseModel):
     request_id: str


class RequestRespond(BaseModel):
     """
     Body for POST /api/requests/{id}/respond.

     decision is validated by the reservation service so that every invalid
     value maps to INVALID_ARGUMENT the same way.
     """
     decision: str = Field(..., description="'accepted' or 'declined'")

     model_config = ConfigDict(json_schema_extra={"example": {"decision": "accepted"}})


class OperationResult(BaseModel):
     success: bool = True


class RequestResponse(BaseModel):
     """Schema for request response."""
     id: str
     buyer_id: str
     property_id: str
     seller_id: str
     message: Optional[str] = None
     status: RequestStatus
     created_at: datetime
     updated_at: datetime

     # Optional related data
     property_title: Optional[str] = None
     buyer_name: Optional[str] = None
     seller_name: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class RequestListResponse(BaseModel):
     requests: List[RequestResponse]
     total: int
