"""
Shared FastAPI dependencies.

Authentication is a bearer JWT signed with JWT_SECRET; its "id" claim is the
caller's profile id.
"""
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

import config
from database import SessionLocal
from services import NotificationDispatcher, ReservationService


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=401, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
     except JWTError:
          raise HTTPException(status_code=403, detail="Invalid token")
     if not payload.get("id"):
          raise HTTPException(status_code=403, detail="Invalid token")
     return payload


def get_caller_id(token: dict = Depends(verify_token)) -> str:
     return str(token["id"])


# Process-wide reservation wiring; main.py starts and stops the dispatcher
notification_dispatcher = NotificationDispatcher(SessionLocal)
reservation_service = ReservationService(SessionLocal, notification_dispatcher)


def get_reservation_service() -> ReservationService:
     return reservation_service
