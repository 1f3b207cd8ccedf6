"""SQLite-backed session repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

import structlog

from core.auth.models import Session
from core.dal.errors import StorageError
from core.dal.session_repository import SessionRepository
from core.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from datetime import datetime

    from core.db.connection import Database

logger = structlog.get_logger()

# Keeps the JSON document in step with the indexed is_active column.
_DEACTIVATE_SET = "is_active = 0, data = json_set(data, '$.is_active', json('false'))"


class SqliteSessionRepository(SessionRepository):
    """SQLite implementation of SessionRepository.

    Each mutation is a single UPDATE statement, so concurrent requests for
    the same user never see a half-applied change; the last write wins.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_session(self, session: Session) -> None:
        """Insert a session. Raises ValueError if the token is already registered."""
        async with self._lock:
            try:
                self._db.connection.execute(
                    "INSERT INTO sessions (id, user_id, token, is_active, last_active, data) VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        session.session_id,
                        session.user_id,
                        session.token,
                        int(session.is_active),
                        to_db_timestamp(session.last_active),
                        session.model_dump_json(),
                    ),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError as exc:
                self._db.connection.rollback()
                raise ValueError("Session token already registered") from exc

    async def get_active_by_token(self, token: str) -> Session | None:
        row = self._db.connection.execute(
            "SELECT data FROM sessions WHERE token = ? AND is_active = 1",
            (token,),
        ).fetchone()
        if row is None:
            return None
        return Session.model_validate(json.loads(row[0]))

    async def get_for_user(self, session_id: str, user_id: str) -> Session | None:
        """Return a session (active or not) only if it belongs to user_id."""
        row = self._db.connection.execute(
            "SELECT data FROM sessions WHERE id = ? AND user_id = ?",
            (session_id, user_id),
        ).fetchone()
        if row is None:
            return None
        return Session.model_validate(json.loads(row[0]))

    async def list_active_for_user(self, user_id: str) -> list[Session]:
        """Active sessions for a user, most recently active first."""
        rows = self._db.connection.execute(
            "SELECT data FROM sessions WHERE user_id = ? AND is_active = 1 ORDER BY last_active DESC",
            (user_id,),
        ).fetchall()
        return [Session.model_validate(json.loads(row[0])) for row in rows]

    async def touch(self, session_id: str, at: datetime) -> None:
        """Record activity on an active session. Raises StorageError on database failure."""
        stamp = to_db_timestamp(at)
        async with self._lock:
            try:
                self._db.connection.execute(
                    "UPDATE sessions SET last_active = ?, data = json_set(data, '$.last_active', ?) "
                    "WHERE id = ? AND is_active = 1",
                    (stamp, at.isoformat(), session_id),
                )
                self._db.connection.commit()
            except (sqlite3.Error, RuntimeError) as exc:
                _rollback(self._db)
                raise StorageError(f"Failed to record activity for session {session_id}") from exc

    async def deactivate(self, session_id: str) -> bool:
        return await self._deactivate_where("id = ? AND is_active = 1", (session_id,)) > 0

    async def deactivate_token(self, user_id: str, token: str) -> bool:
        return await self._deactivate_where("user_id = ? AND token = ? AND is_active = 1", (user_id, token)) > 0

    async def deactivate_all_except(self, user_id: str, except_token: str) -> int:
        return await self._deactivate_where("user_id = ? AND token <> ? AND is_active = 1", (user_id, except_token))

    async def deactivate_all(self, user_id: str) -> int:
        return await self._deactivate_where("user_id = ? AND is_active = 1", (user_id,))

    async def _deactivate_where(self, where: str, params: tuple[str, ...]) -> int:
        async with self._lock:
            cursor = self._db.connection.execute(f"UPDATE sessions SET {_DEACTIVATE_SET} WHERE {where}", params)  # noqa: S608
            self._db.connection.commit()
            if cursor.rowcount:
                logger.debug("sessions deactivated", count=cursor.rowcount)
            return cursor.rowcount


def _rollback(db: Database) -> None:
    """Roll back the open transaction, ignoring a connection that is already unusable."""
    try:
        db.connection.rollback()
    except (sqlite3.Error, RuntimeError):
        logger.warning("rollback failed after session write error")
