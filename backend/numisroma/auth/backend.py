"""Starlette AuthenticationBackend that resolves bearer tokens to active sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from core.errors import SessionTerminatedError, UnauthenticatedError
from numisroma.auth.models import AnonymousUser, AuthenticatedUser, AuthFailure

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from core.auth.service import AuthService


def extract_bearer_token(authorization: str | None) -> tuple[str | None, AuthFailure | None]:
    """Split an Authorization header into its token or the reason there is none.

    Anything other than exactly ``Bearer <token>`` (scheme case-insensitive)
    is malformed.
    """
    if authorization is None or not authorization.strip():
        return None, AuthFailure.MISSING_TOKEN
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":  # noqa: PLR2004
        return None, AuthFailure.MALFORMED_TOKEN
    return parts[1], None


class BearerTokenBackend(AuthenticationBackend):
    """Authenticate requests from the ``Authorization: Bearer`` header.

    Never raises: every outcome yields credentials and a user, so optional
    routes can proceed anonymously and protected routes decide how to
    reject based on ``AnonymousUser.failure``.
    """

    def __init__(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedUser | AnonymousUser]:
        token, failure = extract_bearer_token(conn.headers.get("authorization"))
        if token is None:
            return AuthCredentials([]), AnonymousUser(failure or AuthFailure.MISSING_TOKEN)

        try:
            session = await self._auth_service.authenticate(token)
        except SessionTerminatedError:
            return AuthCredentials([]), AnonymousUser(AuthFailure.SESSION_TERMINATED)
        except UnauthenticatedError:
            return AuthCredentials([]), AnonymousUser(AuthFailure.INVALID_TOKEN)

        return AuthCredentials(["authenticated"]), AuthenticatedUser(
            user_id=session.user_id,
            session_id=session.session_id,
            token=token,
        )
