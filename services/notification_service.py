"""
Notification Service - tells sellers about new requests via Expo push.

The reservation service publishes a request id after its transaction commits.
NotificationDispatcher queues it and a background worker delivers it with its
own retry policy, so delivery never blocks or rolls back the reservation:

- no push token on the seller profile: logged, skipped
- malformed token: logged, not retried
- network error, HTTP 5xx or 429: retried up to max_retries with linear backoff
- push ticket with status "error": logged, not retried
"""
import queue
import re
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from sqlalchemy.orm import Session

import config
from database import get_session_context
from logging_config import get_logger
from models import Profile, PropertyRequest

logger = get_logger(__name__)

EXPO_TOKEN_PATTERN = re.compile(r"^Expo(nent)?PushToken\[.+\]$")
MESSAGE_PREVIEW_LENGTH = 100

_STOP = object()


def is_valid_expo_push_token(token: str) -> bool:
     return bool(token) and EXPO_TOKEN_PATTERN.match(token) is not None


@dataclass
class RequestNotification:
     """Everything needed to build the push message for one request."""
     request_id: str
     property_id: str
     property_title: str
     buyer_name: str
     message: Optional[str]
     seller_id: str
     seller_push_token: Optional[str]


@dataclass
class DeliveryResult:
     success: bool
     error: Optional[str] = None
     attempts: int = 0
     retryable: bool = False


def load_request_notification(db: Session, request_id: str) -> Optional[RequestNotification]:
     request = db.query(PropertyRequest).filter(PropertyRequest.id == request_id).first()
     if request is None:
          return None

     buyer = db.query(Profile).filter(Profile.id == request.buyer_id).first()
     seller = db.query(Profile).filter(Profile.id == request.seller_id).first()

     return RequestNotification(
          request_id=request.id,
          property_id=request.property_id,
          property_title=request.property.title,
          buyer_name=buyer.display_name if buyer else "A buyer",
          message=request.message,
          seller_id=request.seller_id,
          seller_push_token=seller.expo_push_token if seller else None,
     )


def build_push_message(notification: RequestNotification, deep_link_prefix: str = config.DEEP_LINK_PREFIX) -> dict:
     """Expo push payload for a new request."""
     body = f"{notification.buyer_name} is interested in your property"
     if notification.message:
          body += f': "{notification.message[:MESSAGE_PREVIEW_LENGTH]}"'

     return {
          "to": notification.seller_push_token,
          "sound": "default",
          "title": f"New request for {notification.property_title}",
          "body": body,
          "data": {
               "request_id": notification.request_id,
               "property_id": notification.property_id,
               "url": f"{deep_link_prefix}seller/requests/{notification.request_id}",
          },
     }


class ExpoPushClient:
     """Thin client for the Expo push API with bounded retries."""

     def __init__(
          self,
          api_url: str = config.EXPO_PUSH_API,
          max_retries: int = config.NOTIFY_MAX_RETRIES,
          retry_delay: float = config.NOTIFY_RETRY_DELAY,
          timeout: float = config.NOTIFY_TIMEOUT,
          http: Optional[requests.Session] = None,
          sleep: Callable[[float], None] = time.sleep,
     ):
          self.api_url = api_url
          self.max_retries = max_retries
          self.retry_delay = retry_delay
          self.timeout = timeout
          self.http = http or requests.Session()
          self.sleep = sleep

     def send(self, message: dict) -> DeliveryResult:
          result = DeliveryResult(success=False)
          for attempt in range(1, self.max_retries + 1):
               logger.info(
                    "Sending Expo push notification (attempt %s/%s) to %s",
                    attempt, self.max_retries, message.get("to"),
               )
               result = self._send_once(message)
               result.attempts = attempt
               if result.success or not result.retryable:
                    return result
               if attempt < self.max_retries:
                    delay = self.retry_delay * attempt
                    logger.warning("Push delivery failed (%s), retrying in %.1fs", result.error, delay)
                    self.sleep(delay)

          result.error = f"Failed after {self.max_retries} attempts: {result.error}"
          return result

     def _send_once(self, message: dict) -> DeliveryResult:
          try:
               response = self.http.post(
                    self.api_url,
                    json=[message],
                    headers={
                         "Accept": "application/json",
                         "Content-Type": "application/json",
                    },
                    timeout=self.timeout,
               )
          except requests.RequestException as exc:
               return DeliveryResult(success=False, error=str(exc), retryable=True)

          if response.status_code not in (200, 201):
               retryable = response.status_code >= 500 or response.status_code == 429
               return DeliveryResult(
                    success=False,
                    error=f"Expo API error: {response.status_code} - {response.text}",
                    retryable=retryable,
               )

          try:
               payload = response.json()
          except ValueError:
               return DeliveryResult(success=False, error="Unexpected Expo API response format")

          tickets = payload.get("data") if isinstance(payload, dict) else None
          ticket = tickets[0] if isinstance(tickets, list) and tickets else None
          if isinstance(ticket, dict) and ticket.get("status") == "ok":
               logger.info("Push notification accepted by Expo (ticket %s)", ticket.get("id"))
               return DeliveryResult(success=True)
          if isinstance(ticket, dict) and ticket.get("status") == "error":
               return DeliveryResult(
                    success=False,
                    error=f"Push ticket error: {ticket.get('message') or 'Unknown error'}",
               )
          return DeliveryResult(success=False, error="Unexpected Expo API response format")


class NotificationDispatcher:
     """
     In-process queue plus worker thread delivering request_created events.

     publish() never raises; everything after it is best effort and only logged.
     """

     def __init__(
          self,
          session_factory: Optional[Callable[[], Session]] = None,
          push_client: Optional[ExpoPushClient] = None,
          enabled: bool = config.NOTIFICATIONS_ENABLED,
     ):
          self.session_factory = session_factory
          self.push_client = push_client or ExpoPushClient()
          self.enabled = enabled
          self._queue: "queue.Queue" = queue.Queue()
          self._worker: Optional[threading.Thread] = None

     def start(self) -> None:
          if not self.enabled or (self._worker and self._worker.is_alive()):
               return
          self._worker = threading.Thread(target=self._run, name="notification-dispatcher", daemon=True)
          self._worker.start()
          logger.info("Notification dispatcher started")

     def stop(self, timeout: float = 5.0) -> None:
          if not self._worker:
               return
          self._queue.put(_STOP)
          self._worker.join(timeout)
          self._worker = None
          logger.info("Notification dispatcher stopped")

     def publish(self, request_id: str) -> None:
          if not self.enabled:
               logger.debug("Notifications disabled, dropping request %s", request_id)
               return
          self._queue.put(request_id)

     def pending(self) -> int:
          return self._queue.qsize()

     def _run(self) -> None:
          while True:
               item = self._queue.get()
               try:
                    if item is _STOP:
                         return
                    self.deliver(item)
               except Exception:
                    logger.exception("Unhandled error delivering notification for request %s", item)
               finally:
                    self._queue.task_done()

     def deliver(self, request_id: str) -> DeliveryResult:
          """Look up the request and push it to the seller. Never raises for delivery failures."""
          logger.info("Processing push notification for request %s", request_id)

          with get_session_context(self.session_factory) as db:
               notification = load_request_notification(db, request_id)

          if notification is None:
               logger.warning("Request %s not found, notification skipped", request_id)
               return DeliveryResult(success=False, error="Request not found")

          if not notification.seller_push_token:
               logger.warning(
                    "Seller %s has no Expo push token registered, notification skipped",
                    notification.seller_id,
               )
               return DeliveryResult(success=False, error="Seller has no push token registered")

          if not is_valid_expo_push_token(notification.seller_push_token):
               logger.error("Invalid Expo push token format for seller %s", notification.seller_id)
               return DeliveryResult(success=False, error="Invalid Expo push token format")

          result = self.push_client.send(build_push_message(notification))
          if result.success:
               logger.info("Push notification sent for request %s", request_id)
          else:
               logger.error("Failed to send push notification for request %s: %s", request_id, result.error)
          return result
