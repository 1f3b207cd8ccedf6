"""Session management endpoints: list, terminate one, terminate all others."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from numisroma.views.common import current_user

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.auth.session_registry import SessionRegistry


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.auth_service.sessions


async def list_sessions(request: Request) -> JSONResponse:
    user = current_user(request)
    views = await _registry(request).list_active(user.user_id, user.token)
    return JSONResponse({"sessions": [view.to_wire() for view in views]})


async def terminate_session(request: Request) -> JSONResponse:
    user = current_user(request)
    await _registry(request).terminate(request.path_params["session_id"], user.user_id, user.token)
    return JSONResponse({"message": "Session terminated"})


async def terminate_other_sessions(request: Request) -> JSONResponse:
    user = current_user(request)
    count = await _registry(request).terminate_all_others(user.user_id, user.token)
    return JSONResponse({"message": "Other sessions terminated", "terminated": count})
