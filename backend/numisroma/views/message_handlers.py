"""Direct messaging endpoints. Every route requires an authenticated participant."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from core.errors import ValidationFailedError
from core.messaging.service import DEFAULT_PAGE_SIZE
from numisroma.views.common import current_user, parse_body, profile_card
from numisroma.views.schemas import SendMessageRequest

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.messaging.service import MessagingService


def _service(request: Request) -> MessagingService:
    return request.app.state.messaging_service


def _int_query(request: Request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValidationFailedError(f"Query parameter '{name}' must be an integer", field=name) from e


async def list_conversations(request: Request) -> JSONResponse:
    conversations = await _service(request).list_conversations(current_user(request).user_id)
    return JSONResponse([conversation.to_wire() for conversation in conversations])


async def conversation_with(request: Request) -> JSONResponse:
    """GET /api/messages/conversations/with/{user_id} - find or start the conversation with another user."""
    conversation = await _service(request).get_or_create_conversation(
        current_user(request).user_id,
        request.path_params["user_id"],
    )
    return JSONResponse(conversation.to_wire())


async def list_messages(request: Request) -> JSONResponse:
    messages = await _service(request).list_messages(
        request.path_params["conversation_id"],
        current_user(request).user_id,
        page=_int_query(request, "page", 1),
        limit=_int_query(request, "limit", DEFAULT_PAGE_SIZE),
    )
    return JSONResponse([message.to_wire() for message in messages])


async def send_message(request: Request) -> JSONResponse:
    body = await parse_body(request, SendMessageRequest)
    message = await _service(request).send(
        request.path_params["conversation_id"],
        current_user(request).user_id,
        body.content,
        message_type=body.message_type,
        image_url=body.image_url,
    )
    return JSONResponse(message.to_wire(), status_code=HTTPStatus.CREATED)


async def mark_read(request: Request) -> JSONResponse:
    updated = await _service(request).mark_read(request.path_params["conversation_id"], current_user(request).user_id)
    return JSONResponse({"message": "Messages marked as read", "updated": updated})


async def unread_count(request: Request) -> JSONResponse:
    return JSONResponse({"unreadCount": await _service(request).unread_count(current_user(request).user_id)})


async def delete_message(request: Request) -> JSONResponse:
    await _service(request).delete_message(request.path_params["message_id"], current_user(request).user_id)
    return JSONResponse({"message": "Message deleted"})


async def search_recipients(request: Request) -> JSONResponse:
    """GET /api/messages/search/users?query= - people to start a conversation with."""
    users = await _service(request).search_recipients(
        current_user(request).user_id,
        request.query_params.get("query", ""),
    )
    return JSONResponse([profile_card(user) for user in users])
