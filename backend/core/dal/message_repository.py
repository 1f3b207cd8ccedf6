"""Abstract interface for conversation and message persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from core.dal.models import Conversation, Message


class MessageRepository(ABC):
    @abstractmethod
    async def create_conversation(self, conversation: Conversation) -> None: ...

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation | None: ...

    @abstractmethod
    async def find_conversation(self, user_a: str, user_b: str) -> Conversation | None: ...

    @abstractmethod
    async def list_conversations(self, user_id: str) -> list[Conversation]: ...

    @abstractmethod
    async def create_message(self, message: Message) -> None: ...

    @abstractmethod
    async def get_message(self, message_id: str) -> Message | None: ...

    @abstractmethod
    async def list_messages(self, conversation_id: str, *, limit: int, offset: int) -> list[Message]: ...

    @abstractmethod
    async def update_message(self, message: Message) -> None: ...

    @abstractmethod
    async def record_last_message(self, conversation_id: str, message_id: str, at: datetime) -> None: ...

    @abstractmethod
    async def mark_read(self, conversation_id: str, user_id: str, at: datetime) -> int: ...

    @abstractmethod
    async def count_unread(self, user_id: str) -> int: ...
