"""Tests for MessagingService."""

from unittest.mock import AsyncMock

import pytest

from core.dal.models import MessageType
from core.errors import ForbiddenError, InvalidOperationError, NotFoundError
from core.messaging.service import MAX_PAGE_SIZE, MessagingService


@pytest.fixture
def service(message_repo, user_repo):
    return MessagingService(message_repo, user_repo)


@pytest.fixture
async def conversation(service, alice, bob):
    return await service.get_or_create_conversation(alice.user.user_id, bob.user.user_id)


class TestConversations:
    async def test_same_conversation_from_either_side(self, service, alice, bob, conversation):
        again = await service.get_or_create_conversation(bob.user.user_id, alice.user.user_id)

        assert again.conversation_id == conversation.conversation_id
        assert conversation.participants == sorted((alice.user.user_id, bob.user.user_id))

    async def test_not_with_yourself(self, service, alice):
        with pytest.raises(InvalidOperationError):
            await service.get_or_create_conversation(alice.user.user_id, alice.user.user_id)

    async def test_unknown_other_user(self, service, alice):
        with pytest.raises(NotFoundError, match="User not found"):
            await service.get_or_create_conversation(alice.user.user_id, "ghost")

    async def test_concurrent_create_returns_existing(self, message_repo, user_repo, alice, bob, conversation):
        racing_repo = AsyncMock(wraps=message_repo)
        racing_repo.find_conversation.side_effect = [None, conversation]
        racing_repo.create_conversation.side_effect = ValueError("already exists")
        service = MessagingService(racing_repo, user_repo)

        result = await service.get_or_create_conversation(alice.user.user_id, bob.user.user_id)

        assert result == conversation

    async def test_listing_is_per_participant(self, service, alice, bob, conversation):
        assert [c.conversation_id for c in await service.list_conversations(bob.user.user_id)] == [
            conversation.conversation_id,
        ]


class TestSending:
    async def test_send_records_last_message(self, service, message_repo, alice, conversation):
        message = await service.send(conversation.conversation_id, alice.user.user_id, "Ave!")

        stored = await message_repo.get_conversation(conversation.conversation_id)
        assert stored.last_message_id == message.message_id
        assert message.message_type is MessageType.TEXT

    async def test_image_url_only_kept_for_images(self, service, alice, conversation):
        text = await service.send(
            conversation.conversation_id,
            alice.user.user_id,
            "caption",
            image_url="https://img.example/coin.jpg",
        )
        image = await service.send(
            conversation.conversation_id,
            alice.user.user_id,
            "caption",
            message_type=MessageType.IMAGE,
            image_url="https://img.example/coin.jpg",
        )

        assert text.image_url is None
        assert image.image_url == "https://img.example/coin.jpg"

    async def test_outsider_cannot_send_or_read(self, service, auth_service, desktop_client, conversation):
        carol = await auth_service.register("carol", "carol@example.com", "Denarius#1", desktop_client)

        with pytest.raises(ForbiddenError):
            await service.send(conversation.conversation_id, carol.user.user_id, "hi")
        with pytest.raises(ForbiddenError):
            await service.list_messages(conversation.conversation_id, carol.user.user_id)

    async def test_unknown_conversation(self, service, alice):
        with pytest.raises(NotFoundError, match="Conversation not found"):
            await service.send("missing", alice.user.user_id, "hi")


class TestReading:
    async def test_paging_clamps_arguments(self, service, message_repo, alice, conversation):
        message_repo.list_messages = AsyncMock(return_value=[])

        await service.list_messages(conversation.conversation_id, alice.user.user_id, page=0, limit=1000)

        message_repo.list_messages.assert_awaited_once_with(
            conversation.conversation_id,
            limit=MAX_PAGE_SIZE,
            offset=0,
        )

    async def test_mark_read_and_unread_count(self, service, alice, bob, conversation):
        await service.send(conversation.conversation_id, alice.user.user_id, "one")
        await service.send(conversation.conversation_id, alice.user.user_id, "two")

        assert await service.unread_count(bob.user.user_id) == 2
        assert await service.mark_read(conversation.conversation_id, bob.user.user_id) == 2
        assert await service.unread_count(bob.user.user_id) == 0


class TestDeleting:
    async def test_sender_soft_deletes(self, service, message_repo, alice, conversation):
        message = await service.send(conversation.conversation_id, alice.user.user_id, "oops")

        await service.delete_message(message.message_id, alice.user.user_id)

        assert (await message_repo.get_message(message.message_id)).is_deleted
        assert await service.list_messages(conversation.conversation_id, alice.user.user_id) == []

    async def test_only_sender_may_delete(self, service, alice, bob, conversation):
        message = await service.send(conversation.conversation_id, alice.user.user_id, "mine")

        with pytest.raises(ForbiddenError, match="modify this message"):
            await service.delete_message(message.message_id, bob.user.user_id)

    async def test_deleting_twice_is_not_found(self, service, alice, conversation):
        message = await service.send(conversation.conversation_id, alice.user.user_id, "oops")
        await service.delete_message(message.message_id, alice.user.user_id)

        with pytest.raises(NotFoundError, match="Message not found"):
            await service.delete_message(message.message_id, alice.user.user_id)


class TestRecipientSearch:
    async def test_matches_username_or_full_name(self, service, auth_service, alice, bob):
        await auth_service.update_profile(bob.user.user_id, full_name="Marcus Aurelius")

        by_name = await service.search_recipients(alice.user.user_id, "aurel")
        by_username = await service.search_recipients(alice.user.user_id, "BO")

        assert [u.username for u in by_name] == ["bob"]
        assert [u.username for u in by_username] == ["bob"]

    @pytest.mark.parametrize("query", ["", " ", "b", " b "])
    async def test_short_queries_return_nothing(self, service, user_repo, alice, bob, query):
        user_repo.search = AsyncMock(wraps=user_repo.search)

        assert await service.search_recipients(alice.user.user_id, query) == []
        user_repo.search.assert_not_called()

    async def test_email_is_not_searched_and_caller_is_excluded(self, service, alice, bob):
        assert await service.search_recipients(alice.user.user_id, "example.com") == []
        assert await service.search_recipients(alice.user.user_id, "alice") == []
