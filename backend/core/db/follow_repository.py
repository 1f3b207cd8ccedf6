"""SQLite-backed follow edge repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

from core.dal.follow_repository import FollowRepository
from core.dal.models import Follow
from core.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from core.db.connection import Database


class SqliteFollowRepository(FollowRepository):
    """SQLite implementation of FollowRepository.

    The (follower_id, following_id) primary key enforces edge uniqueness and
    a CHECK constraint rejects self edges.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_follow(self, follow: Follow) -> None:
        """Insert an edge. Raises ValueError on a duplicate or self edge."""
        async with self._lock:
            try:
                self._db.connection.execute(
                    "INSERT INTO follows (follower_id, following_id, created_at, data) VALUES (?, ?, ?, ?)",
                    (
                        follow.follower_id,
                        follow.following_id,
                        to_db_timestamp(follow.created_at),
                        follow.model_dump_json(),
                    ),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError as exc:
                self._db.connection.rollback()
                if "check constraint" in str(exc).lower():
                    raise ValueError("A user cannot follow themselves") from exc
                raise ValueError(f"'{follow.follower_id}' already follows '{follow.following_id}'") from exc

    async def delete_follow(self, follower_id: str, following_id: str) -> bool:
        async with self._lock:
            cursor = self._db.connection.execute(
                "DELETE FROM follows WHERE follower_id = ? AND following_id = ?",
                (follower_id, following_id),
            )
            self._db.connection.commit()
            return cursor.rowcount > 0

    async def exists(self, follower_id: str, following_id: str) -> bool:
        row = self._db.connection.execute(
            "SELECT 1 FROM follows WHERE follower_id = ? AND following_id = ?",
            (follower_id, following_id),
        ).fetchone()
        return row is not None

    async def list_followers(self, user_id: str) -> list[Follow]:
        """Edges pointing at user_id, newest first."""
        rows = self._db.connection.execute(
            "SELECT data FROM follows WHERE following_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()
        return [Follow.model_validate(json.loads(row[0])) for row in rows]

    async def list_following(self, user_id: str) -> list[Follow]:
        """Edges starting at user_id, newest first."""
        rows = self._db.connection.execute(
            "SELECT data FROM follows WHERE follower_id = ? ORDER BY created_at DESC",
            (user_id,),
        ).fetchall()
        return [Follow.model_validate(json.loads(row[0])) for row in rows]

    async def delete_for_user(self, user_id: str) -> int:
        """Remove every edge where user_id is either side."""
        async with self._lock:
            cursor = self._db.connection.execute(
                "DELETE FROM follows WHERE follower_id = ? OR following_id = ?",
                (user_id, user_id),
            )
            self._db.connection.commit()
            return cursor.rowcount
