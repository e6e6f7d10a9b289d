"""
Pytest fixtures for auth portal tests
"""

import os

# Settings are read at import time of main.py
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from models.auth import AuthIdentity, AuthSession
from models.profile import Profile


@pytest.fixture
def identity() -> AuthIdentity:
    return AuthIdentity(id="u1", email="alice@example.com")


@pytest.fixture
def auth_session(identity) -> AuthSession:
    return AuthSession(
        access_token="access-123",
        refresh_token="refresh-123",
        expires_at=1700000000,
        user=identity,
    )


@pytest.fixture
def profile() -> Profile:
    return Profile(id="u1", username="alice", full_name="Alice A", avatar_url=None)


@pytest.fixture
def signup_form():
    """Valid signup input as submitted by the form"""
    return {
        "email": "alice@example.com",
        "username": "alice",
        "full_name": "Alice A",
        "password": "secret123",
        "confirm_password": "secret123",
        "terms_accepted": "true",
    }


@pytest.fixture
def mock_auth():
    """AuthClient facade with async methods mocked"""
    auth = MagicMock()
    auth.sign_in = AsyncMock()
    auth.sign_up = AsyncMock()
    auth.sign_out = AsyncMock(return_value=None)
    auth.current_user = AsyncMock(return_value=None)
    auth.refresh = AsyncMock(return_value=None)
    return auth


@pytest.fixture
def mock_profiles():
    """ProfileStore facade with async methods mocked"""
    profiles = MagicMock()
    profiles.insert_profile = AsyncMock(return_value=None)
    profiles.fetch_profile = AsyncMock()
    return profiles


@pytest.fixture
def mock_supabase():
    """Supabase AsyncClient with the calls used by the facades mocked"""
    client = MagicMock()
    client.auth.sign_in_with_password = AsyncMock()
    client.auth.sign_up = AsyncMock()
    client.auth.get_user = AsyncMock()
    client.auth.refresh_session = AsyncMock()
    client.auth.admin.sign_out = AsyncMock(return_value=None)
    return client


@pytest.fixture
def client(mock_auth, mock_profiles):
    """Test client with Supabase facades replaced by mocks"""
    from main import app
    from dependencies import get_auth_client, get_profile_store, get_submissions
    from services.submissions import SubmissionRegistry

    registry = SubmissionRegistry()
    app.dependency_overrides[get_auth_client] = lambda: mock_auth
    app.dependency_overrides[get_profile_store] = lambda: mock_profiles
    app.dependency_overrides[get_submissions] = lambda: registry

    test_client = TestClient(app)
    test_client.registry = registry
    yield test_client

    app.dependency_overrides.clear()
