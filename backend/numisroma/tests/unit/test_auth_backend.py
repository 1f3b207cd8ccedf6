"""Tests for BearerTokenBackend and Authorization header parsing."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.requests import HTTPConnection

from core.auth.models import Session
from core.errors import SessionTerminatedError, UnauthenticatedError
from numisroma.auth.backend import BearerTokenBackend, extract_bearer_token
from numisroma.auth.models import AnonymousUser, AuthenticatedUser, AuthFailure

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _conn(authorization: str | None = None) -> HTTPConnection:
    headers = [] if authorization is None else [(b"authorization", authorization.encode("latin-1"))]
    return HTTPConnection({"type": "http", "headers": headers})


@pytest.fixture
def auth_service() -> MagicMock:
    svc = MagicMock()
    svc.authenticate = AsyncMock(
        return_value=Session(session_id="s1", user_id="u1", token="tok", last_active=NOW, created_at=NOW),
    )
    return svc


@pytest.fixture
def backend(auth_service: MagicMock) -> BearerTokenBackend:
    return BearerTokenBackend(auth_service)


class TestExtractBearerToken:
    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_missing(self, header):
        assert extract_bearer_token(header) == (None, AuthFailure.MISSING_TOKEN)

    @pytest.mark.parametrize("header", ["Bearer", "Basic abc", "Bearer a b", "tok"])
    def test_malformed(self, header):
        assert extract_bearer_token(header) == (None, AuthFailure.MALFORMED_TOKEN)

    @pytest.mark.parametrize("header", ["Bearer tok", "bearer tok", "BEARER  tok"])
    def test_token(self, header):
        assert extract_bearer_token(header) == ("tok", None)


class TestBearerTokenBackend:
    async def test_valid_token_yields_authenticated_user(self, backend, auth_service):
        credentials, user = await backend.authenticate(_conn("Bearer tok"))

        assert credentials.scopes == ["authenticated"]
        assert isinstance(user, AuthenticatedUser)
        assert (user.user_id, user.session_id, user.token) == ("u1", "s1", "tok")
        auth_service.authenticate.assert_awaited_once_with("tok")

    async def test_missing_header_is_anonymous(self, backend, auth_service):
        credentials, user = await backend.authenticate(_conn())

        assert credentials.scopes == []
        assert isinstance(user, AnonymousUser)
        assert user.failure is AuthFailure.MISSING_TOKEN
        assert user.user_id is None
        auth_service.authenticate.assert_not_awaited()

    async def test_malformed_header(self, backend):
        _, user = await backend.authenticate(_conn("Token tok"))

        assert user.failure is AuthFailure.MALFORMED_TOKEN

    async def test_invalid_token(self, backend, auth_service):
        auth_service.authenticate.side_effect = UnauthenticatedError("Invalid token")

        _, user = await backend.authenticate(_conn("Bearer tok"))

        assert not user.is_authenticated
        assert user.failure is AuthFailure.INVALID_TOKEN

    async def test_terminated_session(self, backend, auth_service):
        auth_service.authenticate.side_effect = SessionTerminatedError("gone")

        _, user = await backend.authenticate(_conn("Bearer tok"))

        assert user.failure is AuthFailure.SESSION_TERMINATED
