"""HTTP tests for /api/requests and the error body contract."""
import importlib
import warnings
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

import routers.errors


def _create(client, auth, buyer_id, property_id, message=None):
     body = {"property_id": property_id}
     if message is not None:
          body["message"] = message
     return client.post("/api/requests", json=body, headers=auth(buyer_id))


def _assert_error(response, status_code, code):
     assert response.status_code == status_code, response.text
     error = response.json()["error"]
     assert error["code"] == code
     assert error["message"]
     return error


class TestCreateRequestEndpoint:

     def test_created(self, client, auth, dispatcher, buyer, listed_property):
          response = _create(client, auth, buyer, listed_property, "Is the garden south facing?")

          assert response.status_code == 201
          request_id = response.json()["request_id"]
          assert dispatcher.published == [request_id]

          detail = client.get(f"/api/requests/{request_id}", headers=auth(buyer)).json()
          assert detail["status"] == "pending"
          assert detail["property_title"] == "Sunny 3BR Bungalow"
          assert detail["buyer_name"] == "Bea Buyer"
          assert detail["seller_name"] == "Sam Seller"

          prop = client.get(f"/api/properties/{listed_property}", headers=auth(buyer)).json()
          assert prop["status"] == "requested"

     def test_missing_token(self, client, listed_property):
          response = client.post("/api/requests", json={"property_id": listed_property})
          assert response.status_code == 401

     def test_invalid_token(self, client, listed_property):
          response = client.post(
               "/api/requests",
               json={"property_id": listed_property},
               headers={"Authorization": "Bearer not-a-jwt"},
          )
          assert response.status_code == 403

     def test_self_request(self, client, auth, seller, listed_property):
          _assert_error(_create(client, auth, seller, listed_property), 403, "SELF_REQUEST_FORBIDDEN")

     def test_property_not_available(self, client, auth, buyer, other_buyer, listed_property):
          _create(client, auth, buyer, listed_property)

          error = _assert_error(_create(client, auth, other_buyer, listed_property), 409, "PROPERTY_NOT_AVAILABLE")
          assert error["current_status"] == "requested"

     def test_duplicate_pending(self, client, auth, buyer, seller, make_property, listed_property):
          _create(client, auth, buyer, listed_property)
          second = make_property(seller, title="Second home")

          _assert_error(_create(client, auth, buyer, second), 409, "DUPLICATE_PENDING_REQUEST")

     def test_unknown_property(self, client, auth, buyer):
          response = _create(client, auth, buyer, "6f1c2b55-8a34-4c4e-9d0e-3f1d7b2a9c10")
          error = _assert_error(response, 404, "NOT_FOUND")
          assert error["entity"] == "Property"

     @pytest.mark.parametrize("body", [
          {},
          {"property_id": "not-a-uuid"},
     ])
     def test_invalid_body(self, client, auth, buyer, body):
          response = client.post("/api/requests", json=body, headers=auth(buyer))
          error = _assert_error(response, 422, "INVALID_ARGUMENT")
          assert error["errors"]

     def test_message_too_long(self, client, auth, buyer, listed_property):
          response = _create(client, auth, buyer, listed_property, "x" * 1001)
          _assert_error(response, 422, "INVALID_ARGUMENT")


class TestLifecycleEndpoints:

     @pytest.fixture
     def request_id(self, client, auth, buyer, listed_property):
          return _create(client, auth, buyer, listed_property).json()["request_id"]

     def test_accept(self, client, auth, seller, request_id, listed_property):
          response = client.post(
               f"/api/requests/{request_id}/respond",
               json={"decision": "accepted"},
               headers=auth(seller),
          )

          assert response.status_code == 200
          assert response.json() == {"success": True}
          prop = client.get(f"/api/properties/{listed_property}", headers=auth(seller)).json()
          assert prop["status"] == "sold"

     def test_decline(self, client, auth, seller, request_id, listed_property):
          client.post(f"/api/requests/{request_id}/respond", json={"decision": "declined"}, headers=auth(seller))

          detail = client.get(f"/api/requests/{request_id}", headers=auth(seller)).json()
          assert detail["status"] == "declined"

     def test_invalid_decision(self, client, auth, seller, request_id):
          response = client.post(
               f"/api/requests/{request_id}/respond",
               json={"decision": "maybe"},
               headers=auth(seller),
          )
          _assert_error(response, 422, "INVALID_ARGUMENT")

     def test_buyer_cannot_respond(self, client, auth, buyer, request_id):
          response = client.post(
               f"/api/requests/{request_id}/respond",
               json={"decision": "accepted"},
               headers=auth(buyer),
          )
          _assert_error(response, 403, "FORBIDDEN")

     def test_cancel(self, client, auth, buyer, request_id, listed_property):
          response = client.post(f"/api/requests/{request_id}/cancel", headers=auth(buyer))

          assert response.status_code == 200
          prop = client.get(f"/api/properties/{listed_property}", headers=auth(buyer)).json()
          assert prop["status"] == "available"

     def test_seller_cannot_cancel(self, client, auth, seller, request_id):
          response = client.post(f"/api/requests/{request_id}/cancel", headers=auth(seller))
          _assert_error(response, 403, "FORBIDDEN")

     def test_cancel_twice(self, client, auth, buyer, request_id):
          client.post(f"/api/requests/{request_id}/cancel", headers=auth(buyer))

          response = client.post(f"/api/requests/{request_id}/cancel", headers=auth(buyer))
          error = _assert_error(response, 409, "INVALID_STATE_TRANSITION")
          assert error["current_status"] == "cancelled"

     def test_unknown_request(self, client, auth, buyer):
          response = client.post("/api/requests/does-not-exist/cancel", headers=auth(buyer))
          _assert_error(response, 404, "NOT_FOUND")


class TestRequestQueries:

     def test_active_request(self, client, auth, buyer, listed_property):
          assert client.get("/api/requests/active", headers=auth(buyer)).json() is None

          request_id = _create(client, auth, buyer, listed_property).json()["request_id"]
          assert client.get("/api/requests/active", headers=auth(buyer)).json()["id"] == request_id

          client.post(f"/api/requests/{request_id}/cancel", headers=auth(buyer))
          assert client.get("/api/requests/active", headers=auth(buyer)).json() is None

     def test_mine_and_incoming(self, client, auth, buyer, seller, listed_property):
          request_id = _create(client, auth, buyer, listed_property).json()["request_id"]
          client.post(f"/api/requests/{request_id}/cancel", headers=auth(buyer))
          second_id = _create(client, auth, buyer, listed_property).json()["request_id"]

          mine = client.get("/api/requests/mine", headers=auth(buyer)).json()
          assert mine["total"] == 2

          incoming = client.get("/api/requests/incoming", headers=auth(seller)).json()
          assert {r["id"] for r in incoming["requests"]} == {request_id, second_id}

          pending = client.get("/api/requests/incoming?status=pending", headers=auth(seller)).json()
          assert [r["id"] for r in pending["requests"]] == [second_id]

          assert client.get("/api/requests/incoming", headers=auth(buyer)).json()["total"] == 0

     def test_incoming_invalid_status(self, client, auth, seller):
          response = client.get("/api/requests/incoming?status=archived", headers=auth(seller))
          _assert_error(response, 422, "INVALID_ARGUMENT")

     def test_stranger_cannot_view(self, client, auth, buyer, other_buyer, listed_property):
          request_id = _create(client, auth, buyer, listed_property).json()["request_id"]

          response = client.get(f"/api/requests/{request_id}", headers=auth(other_buyer))
          _assert_error(response, 403, "FORBIDDEN")


def test_unknown_route(client):
     response = client.get("/api/nothing-here")
     assert response.status_code == 404
     assert response.json() == {"error": "Route not found"}


def test_unexpected_constraint_violation_is_conflict(client, auth, buyer, listed_property):
     violation = IntegrityError("INSERT INTO property_history", {}, Exception("CHECK constraint failed"))
     with patch("services.entity_store.append_history", side_effect=violation):
          response = _create(client, auth, buyer, listed_property)

     _assert_error(response, 409, "INTEGRITY_VIOLATION")
     assert "Retry-After" not in response.headers
     prop = client.get(f"/api/properties/{listed_property}", headers=auth(buyer)).json()
     assert prop["status"] == "available"


def test_error_status_map_uses_no_deprecated_constants():
     with warnings.catch_warnings():
          warnings.simplefilter("error", DeprecationWarning)
          module = importlib.reload(routers.errors)

     assert module.ERROR_STATUS["INVALID_ARGUMENT"] == 422
     assert all(isinstance(code, int) for code in module.ERROR_STATUS.values())
