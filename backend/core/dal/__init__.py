"""Data access layer: repository interfaces and shared persistence models."""

from core.dal.collection_repository import CollectionRepository
from core.dal.errors import StorageError
from core.dal.follow_repository import FollowRepository
from core.dal.message_repository import MessageRepository
from core.dal.models import CoinEntry, Collection, Conversation, Follow, Message, MessageType, ReadReceipt
from core.dal.session_repository import SessionRepository
from core.dal.user_repository import UserRepository

__all__ = [
    "CoinEntry",
    "Collection",
    "CollectionRepository",
    "Conversation",
    "Follow",
    "FollowRepository",
    "Message",
    "MessageRepository",
    "MessageType",
    "ReadReceipt",
    "SessionRepository",
    "StorageError",
    "UserRepository",
]
