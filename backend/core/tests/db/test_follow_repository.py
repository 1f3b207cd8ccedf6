"""Tests for SqliteFollowRepository."""

from datetime import UTC, datetime, timedelta

import pytest

from core.dal.models import Follow

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _follow(follower: str, following: str, offset: int = 0) -> Follow:
    return Follow(follower_id=follower, following_id=following, created_at=NOW + timedelta(minutes=offset))


class TestFollowRepository:
    async def test_create_and_exists(self, follow_repo):
        await follow_repo.create_follow(_follow("a", "b"))

        assert await follow_repo.exists("a", "b")
        assert not await follow_repo.exists("b", "a")

    async def test_duplicate_edge_raises(self, follow_repo):
        await follow_repo.create_follow(_follow("a", "b"))

        with pytest.raises(ValueError, match="already follows"):
            await follow_repo.create_follow(_follow("a", "b", offset=1))

    async def test_self_edge_raises(self, follow_repo):
        with pytest.raises(ValueError, match="themselves"):
            await follow_repo.create_follow(_follow("a", "a"))

    async def test_listings_are_newest_first(self, follow_repo):
        await follow_repo.create_follow(_follow("a", "c", offset=0))
        await follow_repo.create_follow(_follow("b", "c", offset=5))
        await follow_repo.create_follow(_follow("c", "a", offset=2))

        assert [f.follower_id for f in await follow_repo.list_followers("c")] == ["b", "a"]
        assert [f.following_id for f in await follow_repo.list_following("c")] == ["a"]

    async def test_delete_follow(self, follow_repo):
        await follow_repo.create_follow(_follow("a", "b"))

        assert await follow_repo.delete_follow("a", "b")
        assert not await follow_repo.delete_follow("a", "b")

    async def test_delete_for_user_removes_both_directions(self, follow_repo):
        await follow_repo.create_follow(_follow("a", "b"))
        await follow_repo.create_follow(_follow("b", "a"))
        await follow_repo.create_follow(_follow("b", "c"))

        assert await follow_repo.delete_for_user("a") == 2
        assert await follow_repo.exists("b", "c")
