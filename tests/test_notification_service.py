"""Seller push notifications: message building, Expo retries and dispatch."""
from unittest.mock import MagicMock

import pytest
import requests

from models import UserRole
from services.notification_service import (
     DeliveryResult,
     ExpoPushClient,
     NotificationDispatcher,
     RequestNotification,
     build_push_message,
     is_valid_expo_push_token,
)


def _response(status_code=200, payload=None, text=""):
     response = MagicMock()
     response.status_code = status_code
     response.text = text
     response.json.return_value = payload if payload is not None else {"data": [{"status": "ok", "id": "ticket-1"}]}
     return response


def _client(*responses, max_retries=3):
     http = MagicMock()
     http.post.side_effect = list(responses)
     sleeps = []
     client = ExpoPushClient(
          api_url="https://push.test/send",
          max_retries=max_retries,
          retry_delay=1.0,
          timeout=5,
          http=http,
          sleep=sleeps.append,
     )
     return client, http, sleeps


def _notification(**overrides):
     data = dict(
          request_id="req-1",
          property_id="prop-1",
          property_title="Sunny 3BR Bungalow",
          buyer_name="Bea Buyer",
          message=None,
          seller_id="seller-1",
          seller_push_token="ExponentPushToken[abc]",
     )
     data.update(overrides)
     return RequestNotification(**data)


@pytest.mark.parametrize("token, expected", [
     ("ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]", True),
     ("ExpoPushToken[xxxxxxxxxxxxxxxxxxxxxx]", True),
     ("ExponentPushToken[]", False),
     ("fcm:abcdef", False),
     ("", False),
])
def test_token_format(token, expected):
     assert is_valid_expo_push_token(token) is expected


def test_push_message_contents():
     message = build_push_message(_notification(message="x" * 150), deep_link_prefix="app://")

     assert message["to"] == "ExponentPushToken[abc]"
     assert message["title"] == "New request for Sunny 3BR Bungalow"
     assert message["body"] == 'Bea Buyer is interested in your property: "' + "x" * 100 + '"'
     assert message["data"] == {
          "request_id": "req-1",
          "property_id": "prop-1",
          "url": "app://seller/requests/req-1",
     }


def test_push_message_without_buyer_message():
     message = build_push_message(_notification())
     assert message["body"] == "Bea Buyer is interested in your property"


class TestExpoPushClient:

     def test_success_first_attempt(self):
          client, http, sleeps = _client(_response())

          result = client.send({"to": "ExponentPushToken[abc]"})

          assert result.success
          assert result.attempts == 1
          assert sleeps == []
          args, kwargs = http.post.call_args
          assert args[0] == "https://push.test/send"
          assert kwargs["json"] == [{"to": "ExponentPushToken[abc]"}]
          assert kwargs["timeout"] == 5

     def test_server_error_is_retried(self):
          client, http, sleeps = _client(_response(502, text="bad gateway"), _response())

          result = client.send({"to": "ExponentPushToken[abc]"})

          assert result.success
          assert result.attempts == 2
          assert sleeps == [1.0]

     def test_network_error_is_retried(self):
          client, http, sleeps = _client(requests.ConnectionError("reset"), _response())

          assert client.send({}).success
          assert http.post.call_count == 2

     def test_gives_up_after_max_retries(self):
          client, http, sleeps = _client(_response(503), _response(503), _response(503))

          result = client.send({})

          assert not result.success
          assert result.attempts == 3
          assert result.error.startswith("Failed after 3 attempts")
          assert sleeps == [1.0, 2.0]

     def test_rate_limit_is_retried(self):
          client, http, sleeps = _client(_response(429), _response())
          assert client.send({}).attempts == 2

     def test_client_error_not_retried(self):
          client, http, sleeps = _client(_response(400, text="bad request"))

          result = client.send({})

          assert not result.success
          assert result.attempts == 1
          assert "400" in result.error
          assert sleeps == []

     def test_ticket_error_not_retried(self):
          payload = {"data": [{"status": "error", "message": "DeviceNotRegistered"}]}
          client, http, sleeps = _client(_response(200, payload))

          result = client.send({})

          assert not result.success
          assert result.attempts == 1
          assert "DeviceNotRegistered" in result.error


class TestNotificationDispatcher:

     def _dispatcher(self, session_factory, send_result=None):
          push_client = MagicMock()
          push_client.send.return_value = send_result or DeliveryResult(success=True, attempts=1)
          return NotificationDispatcher(session_factory, push_client, enabled=True), push_client

     def test_delivers_to_seller_token(self, service, session_factory, buyer, seller, listed_property):
          request_id = service.create_request(buyer, listed_property, "Still available?")
          dispatcher, push_client = self._dispatcher(session_factory)

          result = dispatcher.deliver(request_id)

          assert result.success
          message = push_client.send.call_args[0][0]
          assert message["to"] == "ExponentPushToken[seller-device]"
          assert message["data"]["request_id"] == request_id
          assert "Bea Buyer" in message["body"]

     def test_seller_without_token_is_skipped(
          self, service, session_factory, make_profile, make_property, buyer
     ):
          seller_id = make_profile("Quiet Seller", UserRole.SELLER)
          request_id = service.create_request(buyer, make_property(seller_id))
          dispatcher, push_client = self._dispatcher(session_factory)

          result = dispatcher.deliver(request_id)

          assert not result.success
          assert "no push token" in result.error
          push_client.send.assert_not_called()

     def test_invalid_token_is_not_sent(self, service, session_factory, make_profile, make_property, buyer):
          seller_id = make_profile("Odd Seller", UserRole.SELLER, "not-a-token")
          request_id = service.create_request(buyer, make_property(seller_id))
          dispatcher, push_client = self._dispatcher(session_factory)

          result = dispatcher.deliver(request_id)

          assert result.error == "Invalid Expo push token format"
          push_client.send.assert_not_called()

     def test_unknown_request(self, session_factory):
          dispatcher, push_client = self._dispatcher(session_factory)
          assert dispatcher.deliver("missing").error == "Request not found"

     def test_failed_delivery_does_not_touch_request(self, service, session_factory, buyer, listed_property):
          request_id = service.create_request(buyer, listed_property)
          dispatcher, push_client = self._dispatcher(
               session_factory, DeliveryResult(success=False, error="boom", attempts=3)
          )

          assert not dispatcher.deliver(request_id).success
          # The request is still pending and can be cancelled normally
          assert service.cancel_request(request_id, buyer)

     def test_worker_processes_queue(self, service, session_factory, buyer, listed_property):
          request_id = service.create_request(buyer, listed_property)
          dispatcher, push_client = self._dispatcher(session_factory)

          dispatcher.start()
          dispatcher.publish(request_id)
          dispatcher.stop()

          push_client.send.assert_called_once()
          assert dispatcher.pending() == 0

     def test_worker_survives_unexpected_errors(self, service, session_factory, buyer, listed_property):
          request_id = service.create_request(buyer, listed_property)
          dispatcher, push_client = self._dispatcher(session_factory)
          push_client.send.side_effect = [RuntimeError("unexpected"), DeliveryResult(success=True)]

          dispatcher.start()
          dispatcher.publish(request_id)
          dispatcher.publish(request_id)
          dispatcher.stop()

          assert push_client.send.call_count == 2

     def test_disabled_dispatcher_drops_events(self, session_factory):
          dispatcher = NotificationDispatcher(session_factory, MagicMock(), enabled=False)

          dispatcher.start()
          dispatcher.publish("req-1")

          assert dispatcher.pending() == 0
