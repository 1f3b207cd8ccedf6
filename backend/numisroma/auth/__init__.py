"""API authentication: Starlette backend, request user models, and route policy."""

from numisroma.auth.backend import BearerTokenBackend
from numisroma.auth.models import AnonymousUser, AuthenticatedUser, AuthFailure
from numisroma.auth.policy import optional_auth, protected_api, public_route, validate_route_auth_policy

__all__ = [
    "AnonymousUser",
    "AuthFailure",
    "AuthenticatedUser",
    "BearerTokenBackend",
    "optional_auth",
    "protected_api",
    "public_route",
    "validate_route_auth_policy",
]
