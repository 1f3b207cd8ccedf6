"""Abstract interface for session persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from core.auth.models import Session


class SessionRepository(ABC):
    """Abstract interface for session persistence.

    Sessions are never deleted; the deactivate methods flip ``is_active`` and
    return how many rows changed.
    """

    @abstractmethod
    async def create_session(self, session: Session) -> None: ...

    @abstractmethod
    async def get_active_by_token(self, token: str) -> Session | None: ...

    @abstractmethod
    async def get_for_user(self, session_id: str, user_id: str) -> Session | None: ...

    @abstractmethod
    async def list_active_for_user(self, user_id: str) -> list[Session]: ...

    @abstractmethod
    async def touch(self, session_id: str, at: datetime) -> None: ...

    @abstractmethod
    async def deactivate(self, session_id: str) -> bool: ...

    @abstractmethod
    async def deactivate_token(self, user_id: str, token: str) -> bool: ...

    @abstractmethod
    async def deactivate_all_except(self, user_id: str, except_token: str) -> int: ...

    @abstractmethod
    async def deactivate_all(self, user_id: str) -> int: ...
