"""SQLite-backed user repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

from core.auth.models import User
from core.dal.user_repository import UserRepository

if TYPE_CHECKING:
    from collections.abc import Iterable

    from core.db.connection import Database

# User fields that can be searched, and the SQL expression each reads.
_SEARCH_COLUMNS = {
    "username": "username",
    "email": "email",
    "full_name": "json_extract(data, '$.full_name')",
}


def _uniqueness_message(exc: sqlite3.IntegrityError, user: User) -> str:
    """Map a uniqueness violation on the users table to a domain message."""
    error_msg = str(exc).lower()
    if "users.id" in error_msg:
        return f"User with id '{user.user_id}' already exists"
    if "users.username" in error_msg or "idx_users_username" in error_msg:
        return f"Username '{user.username}' already taken"
    if "users.email" in error_msg or "idx_users_email" in error_msg:
        return "Email already registered"
    return str(exc)  # pragma: no cover


class SqliteUserRepository(UserRepository):
    """SQLite implementation of UserRepository.

    Writes run under an asyncio lock and rely on the unique indexes for
    username (case-insensitive) and email, mapping IntegrityError to ValueError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_user(self, user: User) -> None:
        """Insert a user. Raises ValueError on duplicate id, username, or email."""
        async with self._lock:
            try:
                self._db.connection.execute(
                    "INSERT INTO users (id, username, email, data) VALUES (?, ?, ?, ?)",
                    (user.user_id, user.username, user.email, user.model_dump_json()),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError as exc:
                self._db.connection.rollback()
                raise ValueError(_uniqueness_message(exc, user)) from exc

    async def get_by_id(self, user_id: str) -> User | None:
        return self._fetch_one("SELECT data FROM users WHERE id = ?", (user_id,))

    async def get_by_email(self, email: str) -> User | None:
        return self._fetch_one("SELECT data FROM users WHERE email = ?", (email.strip().lower(),))

    async def get_by_username(self, username: str) -> User | None:
        """Look up a user by username (case-insensitive)."""
        return self._fetch_one("SELECT data FROM users WHERE username = ? COLLATE NOCASE", (username,))

    async def get_by_identifier(self, identifier: str) -> User | None:
        """Look up a user by email or username, as accepted by the login form."""
        return self._fetch_one(
            "SELECT data FROM users WHERE email = ? OR username = ? COLLATE NOCASE",
            (identifier.strip().lower(), identifier),
        )

    async def update_user(self, user: User) -> None:
        """Replace a stored user. Raises ValueError if the new username or email is taken."""
        async with self._lock:
            try:
                self._db.connection.execute(
                    "UPDATE users SET username = ?, email = ?, data = ? WHERE id = ?",
                    (user.username, user.email, user.model_dump_json(), user.user_id),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError as exc:
                self._db.connection.rollback()
                raise ValueError(_uniqueness_message(exc, user)) from exc

    async def delete_user(self, user_id: str) -> bool:
        async with self._lock:
            cursor = self._db.connection.execute("DELETE FROM users WHERE id = ?", (user_id,))
            self._db.connection.commit()
            return cursor.rowcount > 0

    async def search(self, text: str, *, fields: Iterable[str], exclude_id: str, limit: int) -> list[User]:
        """Substring match, not a pattern: ``%`` and ``_`` in text are literal."""
        columns = [_SEARCH_COLUMNS[field] for field in fields]
        if not columns:
            raise ValueError("At least one search field is required")
        needle = text.lower()
        matches = " OR ".join(f"instr(lower(coalesce({column}, '')), ?) > 0" for column in columns)
        sql = f"SELECT data FROM users WHERE id != ? AND ({matches}) ORDER BY username COLLATE NOCASE LIMIT ?"  # noqa: S608
        rows = self._db.connection.execute(
            sql,
            (exclude_id, *[needle] * len(columns), limit),
        ).fetchall()
        return [User.model_validate(json.loads(row[0])) for row in rows]

    async def list_recommended(self, user_id: str, limit: int) -> list[User]:
        rows = self._db.connection.execute(
            """
            SELECT u.data FROM users u
            LEFT JOIN follows f ON f.following_id = u.id
            WHERE u.id != ?
              AND u.id NOT IN (SELECT following_id FROM follows WHERE follower_id = ?)
            GROUP BY u.id
            ORDER BY COUNT(f.follower_id) DESC, u.username COLLATE NOCASE
            LIMIT ?
            """,
            (user_id, user_id, limit),
        ).fetchall()
        return [User.model_validate(json.loads(row[0])) for row in rows]

    def _fetch_one(self, sql: str, params: tuple[str, ...]) -> User | None:
        row = self._db.connection.execute(sql, params).fetchone()
        if row is None:
            return None
        return User.model_validate(json.loads(row[0]))
