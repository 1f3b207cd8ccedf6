"""Direct messaging between two users."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from core.auth.permissions import ensure_not_self, ensure_owner, ensure_participant
from core.auth.session_registry import utcnow
from core.dal.models import Conversation, Message, MessageType
from core.errors import NotFoundError

if TYPE_CHECKING:
    from core.auth.models import User
    from core.dal.message_repository import MessageRepository
    from core.dal.user_repository import UserRepository

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
RECIPIENT_QUERY_MIN_LENGTH = 2
RECIPIENT_SEARCH_LIMIT = 10


class MessagingService:
    """Conversations are unique per pair of users; only participants may read or write them."""

    def __init__(self, message_repo: MessageRepository, user_repo: UserRepository) -> None:
        self._messages = message_repo
        self._users = user_repo

    async def list_conversations(self, user_id: str) -> list[Conversation]:
        return await self._messages.list_conversations(user_id)

    async def search_recipients(self, user_id: str, query: str) -> list[User]:
        """Users to start a conversation with, matched on username or full name.

        Queries shorter than RECIPIENT_QUERY_MIN_LENGTH return nothing.
        """
        query = query.strip()
        if len(query) < RECIPIENT_QUERY_MIN_LENGTH:
            return []
        return await self._users.search(
            query,
            fields=("username", "full_name"),
            exclude_id=user_id,
            limit=RECIPIENT_SEARCH_LIMIT,
        )

    async def get_or_create_conversation(self, user_id: str, other_user_id: str) -> Conversation:
        ensure_not_self(user_id, other_user_id, "You cannot start a conversation with yourself")
        if await self._users.get_by_id(other_user_id) is None:
            raise NotFoundError("User not found")

        existing = await self._messages.find_conversation(user_id, other_user_id)
        if existing is not None:
            return existing

        now = utcnow()
        conversation = Conversation(
            conversation_id=str(uuid4()),
            participants=sorted((user_id, other_user_id)),
            last_activity=now,
            created_at=now,
        )
        try:
            await self._messages.create_conversation(conversation)
        except ValueError:
            # created concurrently by the other participant
            existing = await self._messages.find_conversation(user_id, other_user_id)
            if existing is None:
                raise
            return existing
        logger.info("conversation created", conversation_id=conversation.conversation_id)
        return conversation

    async def list_messages(
        self,
        conversation_id: str,
        user_id: str,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Message]:
        """One page of messages in chronological order; page 1 holds the newest."""
        await self._participant_conversation(conversation_id, user_id)
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        return await self._messages.list_messages(conversation_id, limit=limit, offset=(page - 1) * limit)

    async def send(
        self,
        conversation_id: str,
        sender_id: str,
        content: str,
        *,
        message_type: MessageType = MessageType.TEXT,
        image_url: str | None = None,
    ) -> Message:
        await self._participant_conversation(conversation_id, sender_id)
        now = utcnow()
        message = Message(
            message_id=str(uuid4()),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            message_type=message_type,
            image_url=image_url if message_type is MessageType.IMAGE else None,
            created_at=now,
        )
        await self._messages.create_message(message)
        await self._messages.record_last_message(conversation_id, message.message_id, now)
        logger.info("message sent", conversation_id=conversation_id, message_id=message.message_id)
        return message

    async def mark_read(self, conversation_id: str, user_id: str) -> int:
        await self._participant_conversation(conversation_id, user_id)
        return await self._messages.mark_read(conversation_id, user_id, utcnow())

    async def unread_count(self, user_id: str) -> int:
        return await self._messages.count_unread(user_id)

    async def delete_message(self, message_id: str, user_id: str) -> None:
        """Soft-delete a message. Only its sender may delete it."""
        message = await self._messages.get_message(message_id)
        if message is None or message.is_deleted:
            raise NotFoundError("Message not found")
        ensure_owner(message.sender_id, user_id, "message")
        await self._messages.update_message(message.model_copy(update={"is_deleted": True}))
        logger.info("message deleted", message_id=message_id)

    async def _participant_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        conversation = await self._messages.get_conversation(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        ensure_participant(conversation, user_id)
        return conversation
