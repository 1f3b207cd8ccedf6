"""Follow graph and user discovery endpoints."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from numisroma.views.common import current_user, profile_card

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.auth.models import User
    from core.follows.service import FollowService


def _service(request: Request) -> FollowService:
    return request.app.state.follow_service


def _cards(users: list[User]) -> list[dict[str, object]]:
    return [profile_card(user) for user in users]


async def follow_user(request: Request) -> JSONResponse:
    await _service(request).follow(current_user(request).user_id, request.path_params["user_id"])
    return JSONResponse({"message": "Successfully followed user"}, status_code=HTTPStatus.CREATED)


async def unfollow_user(request: Request) -> JSONResponse:
    await _service(request).unfollow(current_user(request).user_id, request.path_params["user_id"])
    return JSONResponse({"message": "Successfully unfollowed user"})


async def list_followers(request: Request) -> JSONResponse:
    return JSONResponse(_cards(await _service(request).followers(request.path_params["user_id"])))


async def list_following(request: Request) -> JSONResponse:
    return JSONResponse(_cards(await _service(request).following(request.path_params["user_id"])))


async def search_users(request: Request) -> JSONResponse:
    """GET /api/users?search= - match on username or email, excluding the caller."""
    matches = await _service(request).search_users(
        current_user(request).user_id,
        request.query_params.get("search", ""),
    )
    return JSONResponse([{**profile_card(match.user), "isFollowing": match.is_following} for match in matches])


async def recommended_users(request: Request) -> JSONResponse:
    users = await _service(request).recommended(current_user(request).user_id)
    return JSONResponse([{**profile_card(user), "isFollowing": False} for user in users])
