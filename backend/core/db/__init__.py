"""SQLite database layer: connection management and repository implementations."""

from core.db.collection_repository import SqliteCollectionRepository
from core.db.connection import Database
from core.db.follow_repository import SqliteFollowRepository
from core.db.message_repository import SqliteMessageRepository
from core.db.session_repository import SqliteSessionRepository
from core.db.user_repository import SqliteUserRepository

__all__ = [
    "Database",
    "SqliteCollectionRepository",
    "SqliteFollowRepository",
    "SqliteMessageRepository",
    "SqliteSessionRepository",
    "SqliteUserRepository",
]
