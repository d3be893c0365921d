"""
Maps reservation errors to HTTP responses.

Every failure reaches the client as
     {"error": {"code": "<CODE>", "message": "...", ...details}}
with a status chosen by code, so callers can branch on the code without
parsing messages.
"""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from logging_config import get_logger
from services.exceptions import InvalidArgumentError, ReservationError

logger = get_logger(__name__)

ERROR_STATUS = {
     "NOT_FOUND": status.HTTP_404_NOT_FOUND,
     "PROPERTY_NOT_AVAILABLE": status.HTTP_409_CONFLICT,
     "SELF_REQUEST_FORBIDDEN": status.HTTP_403_FORBIDDEN,
     "DUPLICATE_PENDING_REQUEST": status.HTTP_409_CONFLICT,
     "FORBIDDEN": status.HTTP_403_FORBIDDEN,
     "INVALID_STATE_TRANSITION": status.HTTP_409_CONFLICT,
     "INVALID_ARGUMENT": 422,
     "INTEGRITY_VIOLATION": status.HTTP_409_CONFLICT,
     "TRANSIENT": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(exc: ReservationError) -> dict:
     body = {"code": exc.code, "message": exc.message}
     body.update(exc.details)
     return {"error": jsonable_encoder(body)}


def error_response(exc: ReservationError) -> JSONResponse:
     status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
     headers = {"Retry-After": "1"} if exc.retryable else None
     return JSONResponse(status_code=status_code, content=error_body(exc), headers=headers)


async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
     logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
     return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
     errors = [
          {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
          for err in exc.errors()
     ]
     return error_response(InvalidArgumentError("Request validation failed", errors=errors))


def register_error_handlers(app: FastAPI) -> None:
     app.add_exception_handler(ReservationError, reservation_error_handler)
     app.add_exception_handler(RequestValidationError, validation_error_handler)
