"""Abstract interface for coin collection persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.dal.models import Collection


class CollectionRepository(ABC):
    @abstractmethod
    async def create_collection(self, collection: Collection) -> None: ...

    @abstractmethod
    async def get_collection(self, collection_id: str) -> Collection | None: ...

    @abstractmethod
    async def list_by_owner(self, user_id: str, *, include_private: bool) -> list[Collection]: ...

    @abstractmethod
    async def list_public(self) -> list[Collection]: ...

    @abstractmethod
    async def update_collection(self, collection: Collection) -> None: ...

    @abstractmethod
    async def delete_collection(self, collection_id: str) -> bool: ...

    @abstractmethod
    async def delete_by_owner(self, user_id: str) -> int: ...
