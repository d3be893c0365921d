"""
Pytest fixtures for the marketplace backend tests.

Provides a fresh SQLite database per test, a reservation service wired to a
recording dispatcher, profile/property factories and an authenticated
FastAPI test client.
"""
import os
import tempfile

# Configure the app before anything imports config
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.mkdtemp(), "app.db")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["NOTIFICATIONS_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from jose import jwt

import config
from database import build_engine, build_session_factory, get_session, get_session_context
from dependencies import get_reservation_service
from main import app
from models import Base, Profile, UserRole
from services.property_service import PropertyService
from services.reservation_service import ReservationService


class RecordingDispatcher:
     """Stands in for NotificationDispatcher; remembers published request ids."""

     def __init__(self):
          self.published = []

     def publish(self, request_id):
          self.published.append(request_id)


@pytest.fixture(scope="function")
def engine(tmp_path):
     """File-backed SQLite so worker threads share one database."""
     engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
     Base.metadata.create_all(engine)
     yield engine
     engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
     return build_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
     session = session_factory()
     yield session
     session.rollback()
     session.close()


@pytest.fixture(scope="function")
def dispatcher():
     return RecordingDispatcher()


@pytest.fixture(scope="function")
def service(session_factory, dispatcher):
     return ReservationService(session_factory, dispatcher)


@pytest.fixture(scope="function")
def make_profile(session_factory):
     """Factory creating a committed profile; returns its id."""

     def _make_profile(full_name="Test User", role=UserRole.BUYER, push_token=None):
          with get_session_context(session_factory) as db:
               profile = Profile(full_name=full_name, role=role, expo_push_token=push_token)
               db.add(profile)
               db.flush()
               return profile.id

     return _make_profile


@pytest.fixture(scope="function")
def make_property(session_factory):
     """Factory listing a committed, available property; returns its id."""

     def _make_property(seller_id, **overrides):
          data = {
               "title": "Sunny 3BR Bungalow",
               "price": 450000,
               "address": "12 Oak Street",
               "city": "Springfield",
               "state": "IL",
               "zip_code": "62701",
               "bedrooms": 3,
               "bathrooms": 2,
               "amenities": ["garage"],
          }
          data.update(overrides)
          with get_session_context(session_factory) as db:
               return PropertyService.create_property(db, seller_id, data).id

     return _make_property


@pytest.fixture(scope="function")
def seller(make_profile):
     return make_profile("Sam Seller", UserRole.SELLER, "ExponentPushToken[seller-device]")


@pytest.fixture(scope="function")
def buyer(make_profile):
     return make_profile("Bea Buyer", UserRole.BUYER)


@pytest.fixture(scope="function")
def other_buyer(make_profile):
     return make_profile("Oscar Other", UserRole.BUYER)


@pytest.fixture(scope="function")
def listed_property(make_property, seller):
     return make_property(seller)


def auth_headers(profile_id):
     token = jwt.encode({"id": profile_id}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
     return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def auth():
     return auth_headers


@pytest.fixture(scope="function")
def client(session_factory, service):
     """Test client using the per-test database and reservation service."""

     def override_get_session():
          session = session_factory()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     app.dependency_overrides[get_session] = override_get_session
     app.dependency_overrides[get_reservation_service] = lambda: service
     yield TestClient(app)
     app.dependency_overrides.clear()
