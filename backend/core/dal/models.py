"""Persistence models for the data access layer.

Documents are stored as JSON using snake_case field names and exposed to API
clients in camelCase via ``to_wire()``.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Document(BaseModel):
    """Base for stored documents: immutable, snake_case in storage, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class CoinEntry(Document):
    """A catalogued coin placed in a collection, with the owner's measurements."""

    coin_id: str
    weight: float | None = None
    diameter: float | None = None
    grade: str | None = None
    notes: str | None = None


class Collection(Document):
    collection_id: str
    user_id: str  # owner
    name: str
    description: str | None = None
    image: str | None = None
    is_public: bool = False
    coins: list[CoinEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class Follow(Document):
    """Directed edge: follower_id follows following_id."""

    follower_id: str
    following_id: str
    created_at: datetime


class Conversation(Document):
    conversation_id: str
    participants: list[str]  # exactly two user ids, sorted
    last_message_id: str | None = None
    last_activity: datetime
    created_at: datetime


class MessageType(StrEnum):
    TEXT = "text"
    IMAGE = "image"


class ReadReceipt(Document):
    user_id: str
    read_at: datetime


class Message(Document):
    message_id: str
    conversation_id: str
    sender_id: str
    content: str
    message_type: MessageType = MessageType.TEXT
    image_url: str | None = None
    read_by: list[ReadReceipt] = Field(default_factory=list)
    is_deleted: bool = False  # soft delete, hidden from listings
    created_at: datetime
