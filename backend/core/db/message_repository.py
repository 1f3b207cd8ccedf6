"""SQLite-backed conversation and message repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from typing import TYPE_CHECKING

from core.dal.message_repository import MessageRepository
from core.dal.models import Conversation, Message, ReadReceipt
from core.db.connection import to_db_timestamp

if TYPE_CHECKING:
    from datetime import datetime

    from core.db.connection import Database


def _pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Order a participant pair so (a, b) and (b, a) hit the same unique index entry."""
    first, second = sorted((user_a, user_b))
    return first, second


class SqliteMessageRepository(MessageRepository):
    """SQLite implementation of MessageRepository.

    Conversations are unique per participant pair. Deleted messages stay in
    the table and are filtered out of listings.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_conversation(self, conversation: Conversation) -> None:
        """Insert a conversation. Raises ValueError if the pair already has one."""
        participant_a, participant_b = _pair(*conversation.participants)
        async with self._lock:
            try:
                self._db.connection.execute(
                    "INSERT INTO conversations (id, participant_a, participant_b, last_activity, data) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        conversation.conversation_id,
                        participant_a,
                        participant_b,
                        to_db_timestamp(conversation.last_activity),
                        conversation.model_dump_json(),
                    ),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError as exc:
                self._db.connection.rollback()
                msg = f"Conversation between '{participant_a}' and '{participant_b}' already exists"
                raise ValueError(msg) from exc

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        row = self._db.connection.execute(
            "SELECT data FROM conversations WHERE id = ?",
            (conversation_id,),
        ).fetchone()
        if row is None:
            return None
        return Conversation.model_validate(json.loads(row[0]))

    async def find_conversation(self, user_a: str, user_b: str) -> Conversation | None:
        row = self._db.connection.execute(
            "SELECT data FROM conversations WHERE participant_a = ? AND participant_b = ?",
            _pair(user_a, user_b),
        ).fetchone()
        if row is None:
            return None
        return Conversation.model_validate(json.loads(row[0]))

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        """Conversations the user takes part in, most recent activity first."""
        rows = self._db.connection.execute(
            "SELECT data FROM conversations WHERE participant_a = ? OR participant_b = ? ORDER BY last_activity DESC",
            (user_id, user_id),
        ).fetchall()
        return [Conversation.model_validate(json.loads(row[0])) for row in rows]

    async def create_message(self, message: Message) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT INTO messages (id, conversation_id, sender_id, is_deleted, created_at, data) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    message.message_id,
                    message.conversation_id,
                    message.sender_id,
                    int(message.is_deleted),
                    to_db_timestamp(message.created_at),
                    message.model_dump_json(),
                ),
            )
            self._db.connection.commit()

    async def get_message(self, message_id: str) -> Message | None:
        row = self._db.connection.execute("SELECT data FROM messages WHERE id = ?", (message_id,)).fetchone()
        if row is None:
            return None
        return Message.model_validate(json.loads(row[0]))

    async def list_messages(self, conversation_id: str, *, limit: int, offset: int) -> list[Message]:
        """Return a page of visible messages in chronological order.

        Pages are counted from the newest message backwards, so offset 0 is
        the latest ``limit`` messages.
        """
        rows = self._db.connection.execute(
            "SELECT data FROM messages WHERE conversation_id = ? AND is_deleted = 0 "
            "ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (conversation_id, limit, offset),
        ).fetchall()
        messages = [Message.model_validate(json.loads(row[0])) for row in rows]
        messages.reverse()
        return messages

    async def update_message(self, message: Message) -> None:
        async with self._lock:
            self._db.connection.execute(
                "UPDATE messages SET is_deleted = ?, data = ? WHERE id = ?",
                (int(message.is_deleted), message.model_dump_json(), message.message_id),
            )
            self._db.connection.commit()

    async def record_last_message(self, conversation_id: str, message_id: str, at: datetime) -> None:
        async with self._lock:
            self._db.connection.execute(
                "UPDATE conversations SET last_activity = ?, "
                "data = json_set(data, '$.last_message_id', ?, '$.last_activity', ?) "
                "WHERE id = ?",
                (to_db_timestamp(at), message_id, at.isoformat(), conversation_id),
            )
            self._db.connection.commit()

    async def mark_read(self, conversation_id: str, user_id: str, at: datetime) -> int:
        """Add a read receipt for user_id to every message from the other participant that lacks one."""
        async with self._lock:
            rows = self._db.connection.execute(
                "SELECT data FROM messages WHERE conversation_id = ? AND sender_id <> ?",
                (conversation_id, user_id),
            ).fetchall()
            updated = 0
            for row in rows:
                message = Message.model_validate(json.loads(row[0]))
                if any(receipt.user_id == user_id for receipt in message.read_by):
                    continue
                read_by = [*message.read_by, ReadReceipt(user_id=user_id, read_at=at)]
                message = message.model_copy(update={"read_by": read_by})
                self._db.connection.execute(
                    "UPDATE messages SET data = ? WHERE id = ?",
                    (message.model_dump_json(), message.message_id),
                )
                updated += 1
            self._db.connection.commit()
            return updated

    async def count_unread(self, user_id: str) -> int:
        """Visible messages sent to user_id, across all conversations, without a read receipt from them."""
        row = self._db.connection.execute(
            "SELECT COUNT(*) FROM messages m JOIN conversations c ON c.id = m.conversation_id "
            "WHERE (c.participant_a = ? OR c.participant_b = ?) AND m.sender_id <> ? AND m.is_deleted = 0 "
            "AND NOT EXISTS (SELECT 1 FROM json_each(m.data, '$.read_by') r "
            "WHERE json_extract(r.value, '$.user_id') = ?)",
            (user_id, user_id, user_id, user_id),
        ).fetchone()
        return row[0]
