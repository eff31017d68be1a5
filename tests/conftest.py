"""Pytest configuration and shared fixtures."""

import uuid
from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from api.auth import get_users_collection
from api.routes.notes import get_note_repository
from api.services.note_repository import NoteRepository

from tests.fakes import FakeClock, FakeNoteStore, FakeUsersCollection

START = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock():
    """Clock starting at a fixed instant and ticking one second per call."""
    return FakeClock(START)


@pytest.fixture
def note_store():
    return FakeNoteStore()


@pytest.fixture
def repo(note_store, clock):
    return NoteRepository(note_store, clock=clock)


@pytest.fixture
def users_collection():
    return FakeUsersCollection()


@pytest.fixture
def api_client(repo, users_collection):
    """FastAPI test client backed by in-memory stores.

    The client is not entered as a context manager, so the lifespan (and
    its MongoDB connection) never runs.
    """
    from api.app import app

    app.dependency_overrides[get_users_collection] = lambda: users_collection
    app.dependency_overrides[get_note_repository] = lambda: repo
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data():
    """Sample user data for testing with unique email per test."""
    return {
        "email": f"test-{uuid.uuid4().hex[:8]}@jhonote.dev",
        "password": "s3cret-pass",
        "name": "Test User",
    }


@pytest.fixture
def auth_headers(api_client, sample_user_data):
    """Register a user and return its Authorization header."""
    response = api_client.post("/auth/register", json=sample_user_data)
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sample_note_data():
    """Sample note data for testing."""
    return {
        "title": "Buy milk",
        "content": "Two litres, semi-skimmed",
        "tags": ["#Shopping", "home"],
        "priority": "alta",
        "due_date": "2026-10-21",
    }
