from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from core.auth import AuthService, AuthSettings, SessionRegistry, TokenIssuer, get_hasher
from core.build_info import current_build
from core.collections.service import CollectionService
from core.db import (
    Database,
    SqliteCollectionRepository,
    SqliteFollowRepository,
    SqliteMessageRepository,
    SqliteSessionRepository,
    SqliteUserRepository,
)
from core.errors import AppError, ServerError
from core.follows.service import FollowService
from core.logging import setup_logging
from core.messaging.service import MessagingService
from numisroma.auth import BearerTokenBackend, optional_auth, protected_api, public_route, validate_route_auth_policy
from numisroma.server.middleware import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
    SlashNormalizationMiddleware,
)
from numisroma.server.settings import ApiServerSettings
from numisroma.views import auth_handlers, collection_handlers, follow_handlers, message_handlers, session_handlers

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

_HTTP_ERROR_KINDS = {
    HTTPStatus.NOT_FOUND: "not_found",
    HTTPStatus.METHOD_NOT_ALLOWED: "method_not_allowed",
}


async def _app_error_handler(request: Request, exc: Exception) -> Response:
    """Render a domain error as ``{"error": kind, "message": ...}`` with its status."""
    error = cast("AppError", exc)
    if error.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("request failed", error=error.kind, detail=error.message, exc_info=error.__cause__)
    else:
        logger.info("request rejected", error=error.kind, status=error.status_code)
    return JSONResponse(error.to_dict(), status_code=error.status_code)


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    kind = _HTTP_ERROR_KINDS.get(http_exc.status_code, "http_error")
    return JSONResponse(
        {"error": kind, "message": http_exc.detail or ""},
        status_code=http_exc.status_code,
        headers=http_exc.headers,
    )


async def _unexpected_error_handler(_request: Request, exc: Exception) -> Response:
    logger.exception("unhandled error", exc_info=exc)
    error = ServerError("An unexpected error occurred")
    return JSONResponse(error.to_dict(), status_code=error.status_code)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", **current_build().to_dict()})


def build_routes() -> list[Route]:
    routes = [
        Route("/health", public_route(health), methods=["GET"], name="health"),
        # Auth
        Route("/api/auth/register", public_route(auth_handlers.register), methods=["POST"], name="register"),
        Route("/api/auth/login", public_route(auth_handlers.login), methods=["POST"], name="login"),
        Route("/api/auth/logout", protected_api(auth_handlers.logout), methods=["POST"], name="logout"),
        Route("/api/auth/me", protected_api(auth_handlers.me), methods=["GET"], name="me"),
        Route(
            "/api/auth/check-session",
            protected_api(auth_handlers.check_session),
            methods=["GET"],
            name="check_session",
        ),
        Route(
            "/api/auth/change-password",
            protected_api(auth_handlers.change_password),
            methods=["POST"],
            name="change_password",
        ),
        Route(
            "/api/auth/change-username",
            protected_api(auth_handlers.change_username),
            methods=["POST"],
            name="change_username",
        ),
        Route("/api/auth/profile", protected_api(auth_handlers.update_profile), methods=["PUT"], name="update_profile"),
        Route(
            "/api/auth/delete-account",
            protected_api(auth_handlers.delete_account),
            methods=["POST"],
            name="delete_account",
        ),
        # Sessions
        Route("/api/sessions", protected_api(session_handlers.list_sessions), methods=["GET"], name="list_sessions"),
        Route(
            "/api/sessions",
            protected_api(session_handlers.terminate_other_sessions),
            methods=["DELETE"],
            name="terminate_other_sessions",
        ),
        Route(
            "/api/sessions/{session_id}",
            protected_api(session_handlers.terminate_session),
            methods=["DELETE"],
            name="terminate_session",
        ),
        # Collections; literal paths precede /{collection_id}
        Route(
            "/api/collections",
            protected_api(collection_handlers.create_collection),
            methods=["POST"],
            name="create_collection",
        ),
        Route(
            "/api/collections",
            protected_api(collection_handlers.list_my_collections),
            methods=["GET"],
            name="list_my_collections",
        ),
        Route(
            "/api/collections/public",
            public_route(collection_handlers.list_public_collections),
            methods=["GET"],
            name="list_public_collections",
        ),
        Route(
            "/api/collections/user/{user_id}",
            optional_auth(collection_handlers.list_user_collections),
            methods=["GET"],
            name="list_user_collections",
        ),
        Route(
            "/api/collections/{collection_id}",
            optional_auth(collection_handlers.get_collection),
            methods=["GET"],
            name="get_collection",
        ),
        Route(
            "/api/collections/{collection_id}",
            protected_api(collection_handlers.update_collection),
            methods=["PUT"],
            name="update_collection",
        ),
        Route(
            "/api/collections/{collection_id}",
            protected_api(collection_handlers.delete_collection),
            methods=["DELETE"],
            name="delete_collection",
        ),
        Route(
            "/api/collections/{collection_id}/coins",
            protected_api(collection_handlers.add_coin),
            methods=["POST"],
            name="add_coin",
        ),
        Route(
            "/api/collections/{collection_id}/coins/{coin_id}",
            protected_api(collection_handlers.update_coin),
            methods=["PUT"],
            name="update_coin",
        ),
        Route(
            "/api/collections/{collection_id}/coins/{coin_id}",
            protected_api(collection_handlers.remove_coin),
            methods=["DELETE"],
            name="remove_coin",
        ),
        # Users and follows
        Route("/api/users", protected_api(follow_handlers.search_users), methods=["GET"], name="search_users"),
        Route(
            "/api/users/recommended",
            protected_api(follow_handlers.recommended_users),
            methods=["GET"],
            name="recommended_users",
        ),
        Route(
            "/api/users/{user_id}/follow",
            protected_api(follow_handlers.follow_user),
            methods=["POST"],
            name="follow_user",
        ),
        Route(
            "/api/users/{user_id}/unfollow",
            protected_api(follow_handlers.unfollow_user),
            methods=["DELETE"],
            name="unfollow_user",
        ),
        Route(
            "/api/users/{user_id}/followers",
            protected_api(follow_handlers.list_followers),
            methods=["GET"],
            name="list_followers",
        ),
        Route(
            "/api/users/{user_id}/following",
            protected_api(follow_handlers.list_following),
            methods=["GET"],
            name="list_following",
        ),
        # Messages
        Route(
            "/api/messages/conversations",
            protected_api(message_handlers.list_conversations),
            methods=["GET"],
            name="list_conversations",
        ),
        Route(
            "/api/messages/conversations/with/{user_id}",
            protected_api(message_handlers.conversation_with),
            methods=["GET"],
            name="conversation_with",
        ),
        Route(
            "/api/messages/conversations/{conversation_id}/messages",
            protected_api(message_handlers.list_messages),
            methods=["GET"],
            name="list_messages",
        ),
        Route(
            "/api/messages/conversations/{conversation_id}/messages",
            protected_api(message_handlers.send_message),
            methods=["POST"],
            name="send_message",
        ),
        Route(
            "/api/messages/conversations/{conversation_id}/read",
            protected_api(message_handlers.mark_read),
            methods=["POST"],
            name="mark_read",
        ),
        Route(
            "/api/messages/search/users",
            protected_api(message_handlers.search_recipients),
            methods=["GET"],
            name="search_recipients",
        ),
        Route(
            "/api/messages/unread-count",
            protected_api(message_handlers.unread_count),
            methods=["GET"],
            name="unread_count",
        ),
        Route(
            "/api/messages/{message_id}",
            protected_api(message_handlers.delete_message),
            methods=["DELETE"],
            name="delete_message",
        ),
    ]
    validate_route_auth_policy(routes)
    return routes


def create_app(
    settings: ApiServerSettings | None = None,
    auth_settings: AuthSettings | None = None,  # required in production (via get_app)
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = ApiServerSettings()
    if auth_settings is None:  # pragma: no cover
        auth_settings = AuthSettings()  # type: ignore[call-arg]

    routes = build_routes()

    db = Database(auth_settings.database_path)
    db.connect()
    user_repo = SqliteUserRepository(db)
    collection_repo = SqliteCollectionRepository(db)
    follow_repo = SqliteFollowRepository(db)
    session_registry = SessionRegistry(SqliteSessionRepository(db))
    token_issuer = TokenIssuer(auth_settings.jwt_secret, ttl_seconds=auth_settings.token_ttl_seconds)
    auth_service = AuthService(
        user_repo,
        session_registry,
        token_issuer,
        password_hasher=get_hasher(auth_settings.password_hasher),
        collection_repo=collection_repo,
        follow_repo=follow_repo,
    )

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            AppError: _app_error_handler,
            HTTPException: _http_error_handler,
            Exception: _unexpected_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(AuthenticationMiddleware, backend=BearerTokenBackend(auth_service))  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]
    app.add_middleware(RequestContextMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.auth_service = auth_service
    app.state.collection_service = CollectionService(collection_repo)
    app.state.follow_service = FollowService(follow_repo, user_repo)
    app.state.messaging_service = MessagingService(SqliteMessageRepository(db), user_repo)

    logger.info("api server ready")
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory numisroma.server.app:get_app."""
    s = ApiServerSettings()
    auth = AuthSettings()  # type: ignore[call-arg]
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s, auth_settings=auth)
