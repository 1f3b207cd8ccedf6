"""Auth endpoints: registration, login, logout, and account management."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from numisroma.views.common import client_info, current_user, parse_body
from numisroma.views.schemas import (
    ChangePasswordRequest,
    ChangeUsernameRequest,
    DeleteAccountRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
)

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.auth.models import LoginResult
    from core.auth.service import AuthService


def _auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _signed_in(result: LoginResult, status_code: int = HTTPStatus.OK) -> JSONResponse:
    return JSONResponse({"token": result.token, "user": result.user.to_public()}, status_code=status_code)


async def register(request: Request) -> JSONResponse:
    """POST /api/auth/register - create an account and sign it in."""
    body = await parse_body(request, RegisterRequest)
    result = await _auth_service(request).register(
        body.username,
        body.email,
        body.password,
        client_info(request, body.location),
    )
    return _signed_in(result, HTTPStatus.CREATED)


async def login(request: Request) -> JSONResponse:
    """POST /api/auth/login - exchange credentials for a token bound to a new session."""
    body = await parse_body(request, LoginRequest)
    result = await _auth_service(request).login(body.identifier, body.password, client_info(request, body.location))
    return _signed_in(result)


async def logout(request: Request) -> JSONResponse:
    user = current_user(request)
    await _auth_service(request).logout(user.user_id, user.token)
    return JSONResponse({"message": "Logged out"})


async def me(request: Request) -> JSONResponse:
    user = await _auth_service(request).get_profile(current_user(request).user_id)
    return JSONResponse({"user": user.to_public()})


async def check_session(request: Request) -> JSONResponse:
    """GET /api/auth/check-session - reaching the handler means the session is active."""
    return JSONResponse({"active": True, "sessionId": current_user(request).session_id})


async def change_password(request: Request) -> JSONResponse:
    user = current_user(request)
    body = await parse_body(request, ChangePasswordRequest)
    terminated = await _auth_service(request).change_password(
        user.user_id,
        body.current_password,
        body.new_password,
        user.token,
    )
    return JSONResponse({"message": "Password changed", "sessionsTerminated": terminated})


async def change_username(request: Request) -> JSONResponse:
    body = await parse_body(request, ChangeUsernameRequest)
    user = await _auth_service(request).change_username(current_user(request).user_id, body.username)
    return JSONResponse({"message": "Username changed", "user": user.to_public()})


async def update_profile(request: Request) -> JSONResponse:
    body = await parse_body(request, UpdateProfileRequest)
    user = await _auth_service(request).update_profile(
        current_user(request).user_id,
        full_name=body.full_name,
        email=body.email,
        location=body.location,
        bio=body.bio,
    )
    return JSONResponse({"message": "Profile updated", "user": user.to_public()})


async def delete_account(request: Request) -> JSONResponse:
    body = await parse_body(request, DeleteAccountRequest)
    await _auth_service(request).delete_account(current_user(request).user_id, body.password)
    return JSONResponse({"message": "Account deleted"})
