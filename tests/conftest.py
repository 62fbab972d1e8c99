"""Shared fixtures: a file-backed SQLite schema, a fresh document store and API helpers."""
from __future__ import annotations

import os
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_buzztalks.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from buzztalks.database import Base, SessionLocal, engine, get_document_store  # noqa: E402
from buzztalks.main import app  # noqa: E402
from buzztalks.models import Account, Document, RevokedToken  # noqa: E402
from buzztalks.store import DocumentStore  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    """Remove persisted rows and any live subscriptions left by a test."""

    with SessionLocal() as session:
        session.execute(delete(Document))
        session.execute(delete(RevokedToken))
        session.execute(delete(Account))
        session.commit()
    yield
    get_document_store().hub.close_all()


@pytest.fixture
def store() -> DocumentStore:
    """A store with its own subscription hub, isolated from the app singleton."""

    return DocumentStore(SessionLocal)


@pytest.fixture
def app_store() -> DocumentStore:
    return get_document_store()


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict]:
    """Sign up a user through the API and return the auth payload plus headers."""

    def _register(username: str, password: str = "password123", email: str | None = None) -> dict:
        response = client.post(
            "/auth/signup",
            json={"email": email or f"{username}@example.com", "password": password, "username": username},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['access_token']}"}
        return body

    return _register


@pytest.fixture
def seed() -> Callable[[DocumentStore, str], None]:
    """Write a minimal profile document without going through sign-up."""

    from buzztalks.services.profile_service import new_profile_document

    def _seed(target: DocumentStore, user_id: str, username: str | None = None) -> None:
        target.set("users", user_id, new_profile_document(username=username or user_id, email=None, avatar_seed=user_id))

    return _seed
