"""Shared fixtures for API integration tests: a fresh app over a temporary database."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from starlette.testclient import TestClient

from core.auth.settings import AuthSettings
from numisroma.server.app import create_app
from numisroma.server.settings import ApiServerSettings

if TYPE_CHECKING:
    from collections.abc import Callable

TEST_SECRET = "integration-secret-0123456789abcdef"
PASSWORD = "Denarius#1"

DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
PHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.5 Mobile/15E148 Safari/604.1"
)


@pytest.fixture
def app(tmp_path):
    return create_app(
        settings=ApiServerSettings(cors_origins=["https://numisroma.example"]),
        auth_settings=AuthSettings(
            jwt_secret=TEST_SECRET,
            database_path=str(tmp_path / "numisroma.db"),
            password_hasher="simple",
        ),
    )


@pytest.fixture
def client(app):
    with TestClient(app, headers={"User-Agent": DESKTOP_UA}) as test_client:
        yield test_client


@pytest.fixture
def signup(client) -> Callable[[str], tuple[str, dict]]:
    """Register a user and return (token, public user)."""

    def _signup(username: str) -> tuple[str, dict]:
        response = client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _signup


@pytest.fixture
def bearer() -> Callable[[str], dict[str, str]]:
    def _bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _bearer
