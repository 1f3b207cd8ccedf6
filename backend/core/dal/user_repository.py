"""Abstract interface for user persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from core.auth.models import User


class UserRepository(ABC):
    """Abstract interface for user persistence.

    Implementations raise ValueError when a write would break username or
    email uniqueness.
    """

    @abstractmethod
    async def create_user(self, user: User) -> None: ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def get_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def get_by_identifier(self, identifier: str) -> User | None: ...

    @abstractmethod
    async def update_user(self, user: User) -> None: ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool: ...

    @abstractmethod
    async def search(self, text: str, *, fields: Iterable[str], exclude_id: str, limit: int) -> list[User]:
        """Users other than exclude_id whose fields contain text, case-insensitively, by username.

        ``fields`` names User attributes among username, email and full_name.
        Empty text matches every user.
        """

    @abstractmethod
    async def list_recommended(self, user_id: str, limit: int) -> list[User]:
        """Users that user_id does not follow yet (itself excluded), most followed first."""
