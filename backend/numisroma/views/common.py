"""Helpers shared by the API handlers: body parsing, caller identity, client metadata and profile cards."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from core.auth.models import ClientInfo
from core.errors import UnauthenticatedError, ValidationFailedError

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.auth.models import User
    from numisroma.auth.models import AuthenticatedUser

ModelT = TypeVar("ModelT", bound=BaseModel)

UNKNOWN_IP = "unknown"
UNKNOWN_LOCATION = "Unknown"
PROFILE_CARD_FIELDS = ("userId", "username", "fullName", "avatar", "bio")


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Parse the JSON body into model, raising ValidationFailedError with per-field details."""
    raw = await request.body()
    if not raw.strip():
        payload: object = {}
    else:
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise ValidationFailedError("Invalid JSON body") from e
    if not isinstance(payload, dict):
        raise ValidationFailedError("Request body must be a JSON object")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors(include_url=False, include_context=False, include_input=False)
        ]
        raise ValidationFailedError("Validation failed", details=details) from e


def current_user(request: Request) -> AuthenticatedUser:
    """The authenticated caller on a protected route."""
    if not request.user.is_authenticated:  # pragma: no cover
        raise UnauthenticatedError("Authentication required")
    return request.user


def actor_id(request: Request) -> str | None:
    """The caller's user id on an optional-auth route, or None when anonymous."""
    return request.user.user_id if request.user.is_authenticated else None


def client_ip(request: Request) -> str:
    """First X-Forwarded-For entry, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_IP


def client_info(request: Request, location: str | None) -> ClientInfo:
    return ClientInfo(
        user_agent=request.headers.get("user-agent", ""),
        ip_address=client_ip(request),
        location=(location or "").strip() or UNKNOWN_LOCATION,
    )


def profile_card(user: User) -> dict[str, object]:
    """The public subset of a user shown in lists and search results."""
    wire = user.to_public()
    return {key: wire[key] for key in PROFILE_CARD_FIELDS}
