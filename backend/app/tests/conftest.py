"""
Shared fixtures: an in-memory SQLite database per test and a client bound to it.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.main import app


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def trip(client):
    """A trip with two legacy members."""
    response = client.post(
        "/api/trips",
        json={"title": "Lisbon", "city": "Lisbon", "members": ["Alice", "Bob"]}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def dana(client):
    """A registered user with a display name."""
    response = client.post(
        "/api/users",
        json={"email": "dana@example.com", "display_name": "Dana"}
    )
    assert response.status_code == 201
    return response.json()


def as_user(user):
    """Headers identifying the acting user."""
    return {"X-User-Id": str(user["id"])}


@pytest.fixture
def olivia(client):
    """A registered user who owns trips."""
    response = client.post(
        "/api/users",
        json={"email": "olivia@example.com", "display_name": "Olivia"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def owned_trip(client, olivia):
    """A trip owned by Olivia with two legacy members."""
    response = client.post(
        "/api/trips",
        json={"title": "Madrid", "members": ["Alice", "Bob"], "owner_id": olivia["id"]}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def join_trip(client, olivia):
    """Invite a user to a trip as Olivia and accept as that user."""
    def join(trip, user, role="editor"):
        invited = client.post(
            f"/api/trips/{trip['id']}/invitations",
            json={"email": user["email"], "role": role},
            headers=as_user(olivia)
        )
        assert invited.status_code == 201
        accepted = client.post(
            f"/api/invitations/{invited.json()['id']}/accept",
            headers=as_user(user)
        )
        assert accepted.status_code == 200
        return accepted.json()
    return join
