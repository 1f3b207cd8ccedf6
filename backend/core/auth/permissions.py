"""Ownership and visibility predicates shared by every resource handler.

Handlers call these with the resource and the authenticated actor instead of
comparing ids inline. ``actor_id`` is None for anonymous requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.errors import ForbiddenError, InvalidOperationError

if TYPE_CHECKING:
    from core.dal.models import Collection, Conversation


def is_owner(owner_id: str, actor_id: str | None) -> bool:
    return actor_id is not None and owner_id == actor_id


def ensure_owner(owner_id: str, actor_id: str | None, resource: str = "resource") -> None:
    """Raise ForbiddenError unless actor_id owns the resource."""
    if not is_owner(owner_id, actor_id):
        raise ForbiddenError(f"Not authorized to modify this {resource}")


def can_view_collection(collection: Collection, actor_id: str | None) -> bool:
    """Public collections are visible to everyone, private ones only to their owner."""
    return collection.is_public or is_owner(collection.user_id, actor_id)


def ensure_can_view_collection(collection: Collection, actor_id: str | None) -> None:
    if not can_view_collection(collection, actor_id):
        raise ForbiddenError("Not authorized to view this collection")


def ensure_participant(conversation: Conversation, actor_id: str | None) -> None:
    if actor_id is None or actor_id not in conversation.participants:
        raise ForbiddenError("Access to this conversation denied")


def ensure_not_self(actor_id: str, target_id: str, message: str) -> None:
    """Reject operations a user may not perform on their own account (follow, message)."""
    if actor_id == target_id:
        raise InvalidOperationError(message)


def ensure_can_follow(follower_id: str, following_id: str) -> None:
    ensure_not_self(follower_id, following_id, "You cannot follow yourself")
