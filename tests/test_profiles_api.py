"""HTTP tests for profiles and the health check."""
from database import get_session_context
from models import Profile


def test_create_and_fetch_profile(client, auth):
     response = client.post(
          "/api/profiles",
          json={"full_name": "Nina New", "phone": "+1 555 0100", "role": "seller"},
          headers=auth("profile-1"),
     )

     assert response.status_code == 201
     assert response.json()["id"] == "profile-1"
     assert response.json()["role"] == "seller"

     me = client.get("/api/profiles/me", headers=auth("profile-1")).json()
     assert me["full_name"] == "Nina New"

     other = client.get("/api/profiles/profile-1", headers=auth("someone-else")).json()
     assert other["phone"] == "+1 555 0100"


def test_posting_again_updates_profile(client, auth):
     client.post("/api/profiles", json={"full_name": "First Name"}, headers=auth("profile-2"))
     response = client.post("/api/profiles", json={"full_name": "Second Name", "role": "both"}, headers=auth("profile-2"))

     assert response.json()["full_name"] == "Second Name"
     assert response.json()["role"] == "both"


def test_missing_profile(client, auth):
     response = client.get("/api/profiles/me", headers=auth("ghost"))
     assert response.status_code == 404
     assert response.json()["error"]["code"] == "NOT_FOUND"


def test_invalid_role(client, auth):
     response = client.post("/api/profiles", json={"full_name": "X", "role": "admin"}, headers=auth("profile-3"))
     assert response.status_code == 422


def test_push_token(client, auth, session_factory, buyer):
     response = client.put(
          "/api/profiles/me/push-token",
          json={"expo_push_token": "ExponentPushToken[buyer-device]"},
          headers=auth(buyer),
     )
     assert response.status_code == 200

     with get_session_context(session_factory) as db:
          assert db.query(Profile).filter(Profile.id == buyer).one().expo_push_token == "ExponentPushToken[buyer-device]"

     client.put("/api/profiles/me/push-token", json={"expo_push_token": None}, headers=auth(buyer))
     with get_session_context(session_factory) as db:
          assert db.query(Profile).filter(Profile.id == buyer).one().expo_push_token is None


def test_invalid_push_token(client, auth, buyer):
     response = client.put(
          "/api/profiles/me/push-token",
          json={"expo_push_token": "apns:1234"},
          headers=auth(buyer),
     )
     assert response.status_code == 422
     assert response.json()["error"]["code"] == "INVALID_ARGUMENT"


def test_health(client):
     response = client.get("/health")

     assert response.status_code == 200
     assert response.json()["database"] is True
     assert response.json()["pending_notifications"] == 0
