"""
Pytest configuration and fixtures

Every test gets its own in-memory SQLite database, so nothing leaks between
tests. The API client shares the test's session through a get_db override.
"""
import itertools
import os
from datetime import datetime, timedelta

# Settings are read at import time; these must exist before the app is imported.
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.rider_db.rider_db import Rider
from app.models.match_db.match_db import BuddyMatch  # noqa: F401
from main import app


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_rider(db_session):
    """
    Factory for riders in the test database.

    created_at increases by one second per rider so retrieval order is the
    creation order.
    """
    counter = itertools.count()
    base_time = datetime(2024, 1, 1, 8, 0, 0)

    def _make(**fields):
        index = next(counter)
        fields.setdefault("first_name", "Test")
        fields.setdefault("last_name", f"Rider{index}")
        fields.setdefault("location", "San Jose, CA")
        rider = Rider(created_at=base_time + timedelta(seconds=index), **fields)
        db_session.add(rider)
        db_session.commit()
        db_session.refresh(rider)
        return rider

    return _make


@pytest.fixture
def auth_headers():
    """Bearer headers for a rider, as the identity provider would issue them."""
    def _headers(rider):
        token = create_access_token({"sub": str(rider.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
