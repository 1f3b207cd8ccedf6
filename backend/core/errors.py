"""Domain errors surfaced to API clients as a machine-readable kind plus a message.

Each subclass fixes ``kind`` and ``status_code``; the API layer renders any
``AppError`` as ``{"error": kind, "message": message}`` with that status.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class AppError(Exception):
    """Base class for errors with a stable kind and HTTP status."""

    kind: str = "server_error"
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, field: str | None = None, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.field is not None:
            body["field"] = self.field
        if self.details is not None:
            body["details"] = self.details
        return body


class UnauthenticatedError(AppError):
    """No token, a malformed Authorization header, or a token that fails verification."""

    kind = "unauthenticated"
    status_code = HTTPStatus.UNAUTHORIZED


class SessionTerminatedError(AppError):
    """The token verifies but its session was revoked (logout or remote termination)."""

    kind = "session_terminated"
    status_code = HTTPStatus.UNAUTHORIZED


class ForbiddenError(AppError):
    kind = "forbidden"
    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(AppError):
    kind = "not_found"
    status_code = HTTPStatus.NOT_FOUND


class InvalidCredentialsError(AppError):
    """Login failure. Same kind and message for unknown identifier and wrong password."""

    kind = "invalid_credentials"
    status_code = HTTPStatus.BAD_REQUEST


class IncorrectPasswordError(AppError):
    kind = "incorrect_password"
    status_code = HTTPStatus.BAD_REQUEST


class AlreadyRegisteredError(AppError):
    kind = "already_registered"
    status_code = HTTPStatus.CONFLICT


class AlreadyFollowingError(AppError):
    kind = "already_following"
    status_code = HTTPStatus.BAD_REQUEST


class NotFollowingError(AppError):
    kind = "not_following"
    status_code = HTTPStatus.BAD_REQUEST


class CannotTerminateCurrentError(AppError):
    kind = "cannot_terminate_current"
    status_code = HTTPStatus.BAD_REQUEST


class InvalidOperationError(AppError):
    kind = "invalid_operation"
    status_code = HTTPStatus.BAD_REQUEST


class ValidationFailedError(AppError):
    kind = "validation_failed"
    status_code = HTTPStatus.BAD_REQUEST


class ServerError(AppError):
    kind = "server_error"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
