"""Coin collection operations with ownership and visibility enforcement."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import structlog
from pydantic import ValidationError

from core.auth.permissions import ensure_can_view_collection, ensure_owner, is_owner
from core.auth.session_registry import utcnow
from core.dal.models import CoinEntry, Collection
from core.errors import NotFoundError, ValidationFailedError

if TYPE_CHECKING:
    from core.dal.collection_repository import CollectionRepository

logger = structlog.get_logger()

_UPDATABLE_FIELDS = frozenset({"name", "description", "image", "is_public"})
_COIN_FIELDS = frozenset({"weight", "diameter", "grade", "notes"})


class CollectionService:
    def __init__(self, collection_repo: CollectionRepository) -> None:
        self._repo = collection_repo

    async def create(
        self,
        owner_id: str,
        name: str,
        *,
        description: str | None = None,
        image: str | None = None,
        is_public: bool = False,
    ) -> Collection:
        now = utcnow()
        collection = Collection(
            collection_id=str(uuid4()),
            user_id=owner_id,
            name=name,
            description=description,
            image=image,
            is_public=is_public,
            created_at=now,
            updated_at=now,
        )
        await self._repo.create_collection(collection)
        logger.info("collection created", collection_id=collection.collection_id, user_id=owner_id)
        return collection

    async def list_mine(self, owner_id: str) -> list[Collection]:
        return await self._repo.list_by_owner(owner_id, include_private=True)

    async def list_public(self) -> list[Collection]:
        return await self._repo.list_public()

    async def list_for_user(self, user_id: str, actor_id: str | None) -> list[Collection]:
        """A user's collections; private ones are included only when the actor is that user."""
        return await self._repo.list_by_owner(user_id, include_private=is_owner(user_id, actor_id))

    async def get(self, collection_id: str, actor_id: str | None) -> Collection:
        collection = await self._load(collection_id)
        ensure_can_view_collection(collection, actor_id)
        return collection

    async def update(self, collection_id: str, actor_id: str, changes: dict[str, object]) -> Collection:
        """Apply the provided fields (name, description, image, is_public); others are left untouched."""
        collection = await self._load_owned(collection_id, actor_id)
        update = {key: value for key, value in changes.items() if key in _UPDATABLE_FIELDS}
        try:
            updated = Collection.model_validate({**collection.model_dump(), **update, "updated_at": utcnow()})
        except ValidationError as e:
            field = str(e.errors()[0]["loc"][0])
            raise ValidationFailedError(f"Invalid value for {field}", field=field) from e
        await self._repo.update_collection(updated)
        logger.info("collection updated", collection_id=collection_id, fields=sorted(update))
        return updated

    async def delete(self, collection_id: str, actor_id: str) -> None:
        await self._load_owned(collection_id, actor_id)
        await self._repo.delete_collection(collection_id)
        logger.info("collection deleted", collection_id=collection_id, user_id=actor_id)

    async def add_coin(self, collection_id: str, actor_id: str, entry: CoinEntry) -> Collection:
        collection = await self._load_owned(collection_id, actor_id)
        return await self._save_coins(collection, [*collection.coins, entry])

    async def update_coin(
        self,
        collection_id: str,
        actor_id: str,
        coin_id: str,
        changes: dict[str, object],
    ) -> Collection:
        """Update the measurements of the first entry for coin_id."""
        collection = await self._load_owned(collection_id, actor_id)
        index = next((i for i, entry in enumerate(collection.coins) if entry.coin_id == coin_id), None)
        if index is None:
            raise NotFoundError("Coin not found in collection")

        coins = list(collection.coins)
        update = {key: value for key, value in changes.items() if key in _COIN_FIELDS}
        coins[index] = coins[index].model_copy(update=update)
        return await self._save_coins(collection, coins)

    async def remove_coin(self, collection_id: str, actor_id: str, coin_id: str) -> Collection:
        """Remove every entry for coin_id. Removing an absent coin is a no-op."""
        collection = await self._load_owned(collection_id, actor_id)
        return await self._save_coins(collection, [entry for entry in collection.coins if entry.coin_id != coin_id])

    async def _load(self, collection_id: str) -> Collection:
        collection = await self._repo.get_collection(collection_id)
        if collection is None:
            raise NotFoundError("Collection not found")
        return collection

    async def _load_owned(self, collection_id: str, actor_id: str) -> Collection:
        collection = await self._load(collection_id)
        ensure_owner(collection.user_id, actor_id, "collection")
        return collection

    async def _save_coins(self, collection: Collection, coins: list[CoinEntry]) -> Collection:
        updated = collection.model_copy(update={"coins": coins, "updated_at": utcnow()})
        await self._repo.update_collection(updated)
        return updated
