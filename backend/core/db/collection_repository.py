"""SQLite-backed collection repository."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

from core.dal.collection_repository import CollectionRepository
from core.dal.models import Collection
from core.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from core.db.connection import Database


class SqliteCollectionRepository(CollectionRepository):
    """SQLite implementation of CollectionRepository. Listings are newest first."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_collection(self, collection: Collection) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT INTO collections (id, user_id, is_public, created_at, data) VALUES (?, ?, ?, ?, ?)",
                (
                    collection.collection_id,
                    collection.user_id,
                    int(collection.is_public),
                    to_db_timestamp(collection.created_at),
                    collection.model_dump_json(),
                ),
            )
            self._db.connection.commit()

    async def get_collection(self, collection_id: str) -> Collection | None:
        row = self._db.connection.execute(
            "SELECT data FROM collections WHERE id = ?",
            (collection_id,),
        ).fetchone()
        if row is None:
            return None
        return Collection.model_validate(json.loads(row[0]))

    async def list_by_owner(self, user_id: str, *, include_private: bool) -> list[Collection]:
        sql = "SELECT data FROM collections WHERE user_id = ?"
        if not include_private:
            sql += " AND is_public = 1"
        rows = self._db.connection.execute(f"{sql} ORDER BY created_at DESC", (user_id,)).fetchall()
        return [Collection.model_validate(json.loads(row[0])) for row in rows]

    async def list_public(self) -> list[Collection]:
        rows = self._db.connection.execute(
            "SELECT data FROM collections WHERE is_public = 1 ORDER BY created_at DESC",
        ).fetchall()
        return [Collection.model_validate(json.loads(row[0])) for row in rows]

    async def update_collection(self, collection: Collection) -> None:
        async with self._lock:
            self._db.connection.execute(
                "UPDATE collections SET is_public = ?, data = ? WHERE id = ?",
                (int(collection.is_public), collection.model_dump_json(), collection.collection_id),
            )
            self._db.connection.commit()

    async def delete_collection(self, collection_id: str) -> bool:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM collections WHERE id = ?", (collection_id,))
            self._db.connection.commit()
            return cursor.rowcount > 0

    async def delete_by_owner(self, user_id: str) -> int:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM collections WHERE user_id = ?", (user_id,))
            self._db.connection.commit()
            return cursor.rowcount
