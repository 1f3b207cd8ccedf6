"""Route auth policy helpers for fail-closed authorization.

Each helper wraps a route endpoint and sets the ``AUTH_POLICY_ATTR`` marker
so that startup validation can verify every route has an explicit policy.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING

from starlette.authentication import has_required_scope
from starlette.routing import Mount, Route

from core.errors import AppError, SessionTerminatedError, UnauthenticatedError
from numisroma.auth.models import AuthFailure

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.routing import BaseRoute

AUTH_POLICY_ATTR = "__auth_policy__"

_FAILURE_MESSAGES = {
    AuthFailure.MISSING_TOKEN: "Authentication required",
    AuthFailure.MALFORMED_TOKEN: "Malformed authorization header",
    AuthFailure.INVALID_TOKEN: "Invalid or expired token",
}


def authentication_error(request: Request) -> AppError:
    """Map the backend's recorded failure to the error a protected route raises."""
    failure = getattr(request.user, "failure", AuthFailure.MISSING_TOKEN)
    if failure is AuthFailure.SESSION_TERMINATED:
        return SessionTerminatedError("Session has been terminated, please log in again")
    return UnauthenticatedError(_FAILURE_MESSAGES.get(failure, _FAILURE_MESSAGES[AuthFailure.MISSING_TOKEN]))


def _wrap(endpoint: Callable[..., Any], policy: str, *, require_auth: bool) -> Callable[..., Any]:
    """Wrap endpoint in a fresh callable carrying the policy marker.

    The marker lives on the wrapper so reusing the same function on another
    route without wrapping it again leaves that route unclassified.
    """
    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_wrapper(request: Request, **kwargs: str) -> Response:
            if require_auth and not has_required_scope(request, ["authenticated"]):
                raise authentication_error(request)
            return await endpoint(request, **kwargs)

        setattr(async_wrapper, AUTH_POLICY_ATTR, policy)
        return async_wrapper

    @functools.wraps(endpoint)
    def sync_wrapper(request: Request, **kwargs: str) -> Response:
        if require_auth and not has_required_scope(request, ["authenticated"]):
            raise authentication_error(request)
        return endpoint(request, **kwargs)

    setattr(sync_wrapper, AUTH_POLICY_ATTR, policy)
    return sync_wrapper


def protected_api(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Require an authenticated session; raise 401 (unauthenticated or session_terminated) otherwise."""
    return _wrap(endpoint, "protected_api", require_auth=True)


def optional_auth(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the caller when authenticated and proceed anonymously otherwise."""
    return _wrap(endpoint, "optional_auth", require_auth=False)


def public_route(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Mark endpoint as explicitly public (no auth semantics)."""
    return _wrap(endpoint, "public", require_auth=False)


def validate_route_auth_policy(routes: list[BaseRoute]) -> None:
    """Verify every Route has an auth policy marker. Mount routes are exempt.

    Raises RuntimeError listing all unclassified routes if any are found.
    """
    unclassified: list[str] = []
    for route in routes:
        if isinstance(route, Mount):
            continue
        if isinstance(route, Route) and not hasattr(route.endpoint, AUTH_POLICY_ATTR):
            name = route.name or getattr(route.endpoint, "__name__", "unknown")
            unclassified.append(f"{route.path} ({name})")

    if unclassified:
        msg = f"Unclassified routes missing auth policy: {', '.join(unclassified)}"
        raise RuntimeError(msg)
