"""Shared fixtures: an in-memory database and an authenticated API client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from journal.database import create_db_and_tables, get_session
from journal.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    def _session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    # Not used as a context manager: the lifespan would touch the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "trader@example.com") -> dict:
    response = client.post("/api/auth/register", json={
        "email": email,
        "password": "Secret123",
        "name": "Trader",
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)
