"""Follow graph operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from core.auth.permissions import ensure_can_follow
from core.auth.session_registry import utcnow
from core.dal.models import Follow
from core.errors import AlreadyFollowingError, NotFollowingError, NotFoundError

if TYPE_CHECKING:
    from core.auth.models import User
    from core.dal.follow_repository import FollowRepository
    from core.dal.user_repository import UserRepository

logger = structlog.get_logger()

USER_SEARCH_LIMIT = 50
RECOMMENDATION_LIMIT = 3


@dataclass(frozen=True)
class UserMatch:
    user: User
    is_following: bool


class FollowService:
    """Create and remove follow edges and list either side of a user's graph.

    Listings resolve edges to user records, newest edge first; edges whose
    user no longer exists are skipped.
    """

    def __init__(self, follow_repo: FollowRepository, user_repo: UserRepository) -> None:
        self._follows = follow_repo
        self._users = user_repo

    async def follow(self, follower_id: str, following_id: str) -> Follow:
        ensure_can_follow(follower_id, following_id)
        if await self._users.get_by_id(following_id) is None:
            raise NotFoundError("User not found")
        if await self._follows.exists(follower_id, following_id):
            raise AlreadyFollowingError("You are already following this user")

        follow = Follow(follower_id=follower_id, following_id=following_id, created_at=utcnow())
        try:
            await self._follows.create_follow(follow)
        except ValueError as e:
            raise AlreadyFollowingError("You are already following this user") from e
        logger.info("user followed", follower_id=follower_id, following_id=following_id)
        return follow

    async def unfollow(self, follower_id: str, following_id: str) -> None:
        if not await self._follows.delete_follow(follower_id, following_id):
            raise NotFollowingError("You are not following this user")
        logger.info("user unfollowed", follower_id=follower_id, following_id=following_id)

    async def followers(self, user_id: str) -> list[User]:
        edges = await self._follows.list_followers(user_id)
        return await self._resolve([edge.follower_id for edge in edges])

    async def following(self, user_id: str) -> list[User]:
        edges = await self._follows.list_following(user_id)
        return await self._resolve([edge.following_id for edge in edges])

    async def search_users(self, actor_id: str, text: str) -> list[UserMatch]:
        """Users whose username or email contains text, flagged with whether actor_id follows them.

        Blank text lists everyone but the actor, up to USER_SEARCH_LIMIT.
        """
        users = await self._users.search(
            text.strip(),
            fields=("username", "email"),
            exclude_id=actor_id,
            limit=USER_SEARCH_LIMIT,
        )
        following = {edge.following_id for edge in await self._follows.list_following(actor_id)}
        return [UserMatch(user=user, is_following=user.user_id in following) for user in users]

    async def recommended(self, actor_id: str) -> list[User]:
        """The most followed users actor_id does not follow yet."""
        return await self._users.list_recommended(actor_id, RECOMMENDATION_LIMIT)

    async def _resolve(self, user_ids: list[str]) -> list[User]:
        users = []
        for user_id in user_ids:
            user = await self._users.get_by_id(user_id)
            if user is not None:
                users.append(user)
        return users
