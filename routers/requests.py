# routers/requests.py
"""
Request API routes.

Thin wrapper over ReservationService: every state change goes through the
service in its own transaction, and reservation errors are turned into the
{"error": {...}} body by routers.errors.

Role-based access:
- Buyer: create, cancel, list own requests
- Seller: respond, list incoming requests
- Either party: view a single request
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_caller_id, get_reservation_service
from models import PropertyRequest, RequestStatus
from schemas.request import (
     OperationResult,
     RequestCreate,
     RequestCreated,
     RequestListResponse,
     RequestRespond,
     RequestResponse,
)
from services.reservation_service import (
     ReservationService,
     find_active_request,
     get_request_for_party,
     list_requests_for_buyer,
     list_requests_for_seller,
)

router = APIRouter(prefix="/api/requests", tags=["requests"])


def _build_request_response(request: PropertyRequest) -> RequestResponse:
     """Build response with related property and party names."""
     response = RequestResponse.model_validate(request)
     if request.property:
          response.property_title = request.property.title
     if request.buyer:
          response.buyer_name = request.buyer.display_name
     if request.seller:
          response.seller_name = request.seller.display_name
     return response


@router.post(
     "",
     response_model=RequestCreated,
     status_code=status.HTTP_201_CREATED,
     summary="Request an available property"
)
def create_request(
     body: RequestCreate,
     caller_id: str = Depends(get_caller_id),
     service: ReservationService = Depends(get_reservation_service),
):
     """
     Reserve a property for the calling buyer.

     - **property_id**: property to request (must be available)
     - **message**: optional note shown to the seller

     A buyer can hold only one pending request at a time.
     """
     request_id = service.create_request(caller_id, str(body.property_id), body.message)
     return RequestCreated(request_id=request_id)


@router.get(
     "/active",
     response_model=Optional[RequestResponse],
     summary="Get the caller's pending request"
)
def get_active_request(
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     request = find_active_request(db, caller_id)
     return _build_request_response(request) if request else None


@router.get("/mine", response_model=RequestListResponse, summary="List requests made by the caller")
def get_my_requests(
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     requests = list_requests_for_buyer(db, caller_id)
     return RequestListResponse(
          requests=[_build_request_response(r) for r in requests],
          total=len(requests),
     )


@router.get(
     "/incoming",
     response_model=RequestListResponse,
     summary="List requests received on the caller's properties"
)
def get_incoming_requests(
     status: Optional[RequestStatus] = Query(None, description="Filter by status"),
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     requests = list_requests_for_seller(db, caller_id, status)
     return RequestListResponse(
          requests=[_build_request_response(r) for r in requests],
          total=len(requests),
     )


@router.get("/{request_id}", response_model=RequestResponse, summary="Get a request by ID")
def get_request(
     request_id: str,
     caller_id: str = Depends(get_caller_id),
     db: Session = Depends(get_session),
):
     """Only the buyer or the seller of a request can view it."""
     return _build_request_response(get_request_for_party(db, request_id, caller_id))


@router.post("/{request_id}/cancel", response_model=OperationResult, summary="Cancel a pending request")
def cancel_request(
     request_id: str,
     caller_id: str = Depends(get_caller_id),
     service: ReservationService = Depends(get_reservation_service),
):
     """Buyer withdraws their pending request; the property becomes available again."""
     return OperationResult(success=service.cancel_request(request_id, caller_id))


@router.post(
     "/{request_id}/respond",
     response_model=OperationResult,
     summary="Accept or decline a pending request"
)
def respond_to_request(
     request_id: str,
     body: RequestRespond,
     caller_id: str = Depends(get_caller_id),
     service: ReservationService = Depends(get_reservation_service),
):
     """
     Seller decision on a pending request.

     - **accepted**: property is marked sold
     - **declined**: property becomes available again
     """
     return OperationResult(success=service.respond_to_request(request_id, caller_id, body.decision))
