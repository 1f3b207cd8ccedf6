"""Tests for SqliteUserRepository."""

from datetime import UTC, datetime

import pytest

from core.auth.models import User
from core.dal.models import Follow

NOW = datetime(2026, 3, 1, tzinfo=UTC)


def _user(user_id: str = "u1", username: str = "alice", email: str = "alice@example.com") -> User:
    return User(
        user_id=user_id,
        username=username,
        email=email,
        password_hash="sha256$abc",
        created_at=NOW,
        updated_at=NOW,
    )


class TestCreateAndFetch:
    async def test_round_trips_document(self, user_repo):
        await user_repo.create_user(_user())

        user = await user_repo.get_by_id("u1")

        assert user == _user()

    async def test_lookup_by_username_ignores_case(self, user_repo):
        await user_repo.create_user(_user())

        assert (await user_repo.get_by_username("ALICE")).user_id == "u1"

    async def test_lookup_by_identifier_accepts_email_or_username(self, user_repo):
        await user_repo.create_user(_user())

        assert (await user_repo.get_by_identifier("Alice@Example.com")).user_id == "u1"
        assert (await user_repo.get_by_identifier("alice")).user_id == "u1"
        assert await user_repo.get_by_identifier("nobody") is None

    async def test_duplicate_username_raises_value_error(self, user_repo):
        await user_repo.create_user(_user())

        with pytest.raises(ValueError, match="already taken"):
            await user_repo.create_user(_user(user_id="u2", username="Alice", email="other@example.com"))

    async def test_duplicate_email_raises_value_error(self, user_repo):
        await user_repo.create_user(_user())

        with pytest.raises(ValueError, match="Email already registered"):
            await user_repo.create_user(_user(user_id="u2", username="bob"))


class TestUpdateAndDelete:
    async def test_update_replaces_indexed_columns(self, user_repo):
        await user_repo.create_user(_user())

        await user_repo.update_user(_user(username="aurelia", email="aurelia@example.com"))

        assert await user_repo.get_by_username("alice") is None
        assert (await user_repo.get_by_email("aurelia@example.com")).username == "aurelia"

    async def test_update_to_taken_username_raises(self, user_repo):
        await user_repo.create_user(_user())
        await user_repo.create_user(_user(user_id="u2", username="bob", email="bob@example.com"))

        with pytest.raises(ValueError, match="already taken"):
            await user_repo.update_user(_user(user_id="u2", username="alice", email="bob@example.com"))

    async def test_delete(self, user_repo):
        await user_repo.create_user(_user())

        assert await user_repo.delete_user("u1")
        assert not await user_repo.delete_user("u1")
        assert await user_repo.get_by_id("u1") is None


class TestSearch:
    @pytest.fixture
    async def users(self, user_repo):
        await user_repo.create_user(_user())
        marcus = _user("u2", "Marcus", "marcus@rome.example").model_copy(update={"full_name": "Marcus Aurelius"})
        await user_repo.create_user(marcus)
        await user_repo.create_user(_user("u3", "faustina", "faustina@example.com"))

    async def test_substring_match_ignores_case(self, user_repo, users):
        found = await user_repo.search("MARC", fields=("username",), exclude_id="u1", limit=10)

        assert [u.user_id for u in found] == ["u2"]

    async def test_matches_any_listed_field(self, user_repo, users):
        by_email = await user_repo.search("rome.example", fields=("username", "email"), exclude_id="u1", limit=10)
        by_full_name = await user_repo.search("aurelius", fields=("username", "full_name"), exclude_id="u1", limit=10)

        assert [u.user_id for u in by_email] == ["u2"]
        assert [u.user_id for u in by_full_name] == ["u2"]
        assert await user_repo.search("aurelius", fields=("username",), exclude_id="u1", limit=10) == []

    async def test_excludes_caller_and_orders_by_username(self, user_repo, users):
        found = await user_repo.search("", fields=("username",), exclude_id="u3", limit=10)

        assert [u.username for u in found] == ["alice", "Marcus"]

    async def test_limit(self, user_repo, users):
        assert len(await user_repo.search("", fields=("email",), exclude_id="nobody", limit=2)) == 2

    async def test_wildcards_are_literal(self, user_repo, users):
        assert await user_repo.search("%", fields=("username", "email"), exclude_id="nobody", limit=10) == []
        assert await user_repo.search("_", fields=("username",), exclude_id="nobody", limit=10) == []


class TestRecommended:
    async def test_most_followed_unfollowed_users_first(self, user_repo, follow_repo):
        for user_id, name in [("u1", "alice"), ("u2", "bob"), ("u3", "carol"), ("u4", "dave"), ("u5", "erin")]:
            await user_repo.create_user(_user(user_id, name, f"{name}@example.com"))
        for follower, following in [("u2", "u4"), ("u3", "u4"), ("u5", "u3"), ("u1", "u5"), ("u2", "u5")]:
            await follow_repo.create_follow(
                Follow(follower_id=follower, following_id=following, created_at=NOW),
            )

        recommended = await user_repo.list_recommended("u1", limit=3)

        # u5 is already followed by u1; u2 has no followers and sorts last
        assert [u.user_id for u in recommended] == ["u4", "u3", "u2"]
        assert [u.user_id for u in await user_repo.list_recommended("u1", limit=1)] == ["u4"]

    async def test_nobody_to_recommend(self, user_repo):
        await user_repo.create_user(_user())

        assert await user_repo.list_recommended("u1", limit=3) == []
