"""Abstract interface for follow edge persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.dal.models import Follow


class FollowRepository(ABC):
    """Abstract interface for follow edges.

    ``create_follow`` raises ValueError when the (follower, following) pair
    already exists.
    """

    @abstractmethod
    async def create_follow(self, follow: Follow) -> None: ...

    @abstractmethod
    async def delete_follow(self, follower_id: str, following_id: str) -> bool: ...

    @abstractmethod
    async def exists(self, follower_id: str, following_id: str) -> bool: ...

    @abstractmethod
    async def list_followers(self, user_id: str) -> list[Follow]: ...

    @abstractmethod
    async def list_following(self, user_id: str) -> list[Follow]: ...

    @abstractmethod
    async def delete_for_user(self, user_id: str) -> int: ...
