"""User models for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from enum import StrEnum

from starlette.authentication import BaseUser, UnauthenticatedUser


class AuthFailure(StrEnum):
    """Why a request carries no authenticated user."""

    MISSING_TOKEN = "missing_token"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_TOKEN = "invalid_token"
    SESSION_TERMINATED = "session_terminated"


class AuthenticatedUser(BaseUser):
    """The caller behind a verified bearer token with an active session."""

    def __init__(self, user_id: str, session_id: str, token: str) -> None:
        self._user_id = user_id
        self._session_id = session_id
        self._token = token

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return self._user_id

    @property
    def identity(self) -> str:  # pragma: no cover
        return self._user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def token(self) -> str:
        return self._token


class AnonymousUser(UnauthenticatedUser):
    """Unauthenticated caller, remembering why authentication did not succeed."""

    def __init__(self, failure: AuthFailure) -> None:
        self.failure = failure

    @property
    def user_id(self) -> None:
        return None
