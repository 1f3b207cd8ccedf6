"""Auth service coordinating registration, login, sessions, and account lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from core.auth.models import LoginResult, User
from core.auth.session_registry import utcnow
from core.auth.tokens import InvalidTokenError
from core.auth.validation import validate_bio, validate_email, validate_password, validate_username
from core.errors import (
    AlreadyRegisteredError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    NotFoundError,
    ServerError,
    SessionTerminatedError,
    UnauthenticatedError,
    ValidationFailedError,
)

if TYPE_CHECKING:
    from core.auth.models import ClientInfo, Session
    from core.auth.password import PasswordHasher
    from core.auth.session_registry import SessionRegistry
    from core.auth.tokens import TokenIssuer
    from core.dal.collection_repository import CollectionRepository
    from core.dal.follow_repository import FollowRepository
    from core.dal.user_repository import UserRepository

logger = structlog.get_logger()

_INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Coordinate user registration, login, request authentication, and account changes."""

    def __init__(
        self,
        user_repo: UserRepository,
        session_registry: SessionRegistry,
        token_issuer: TokenIssuer,
        *,
        password_hasher: PasswordHasher,
        collection_repo: CollectionRepository,
        follow_repo: FollowRepository,
    ) -> None:
        self._user_repo = user_repo
        self._sessions = session_registry
        self._tokens = token_issuer
        self._hasher = password_hasher
        self._collection_repo = collection_repo
        self._follow_repo = follow_repo

    @property
    def sessions(self) -> SessionRegistry:
        return self._sessions

    async def register(self, username: str, email: str, password: str, client: ClientInfo) -> LoginResult:
        """Create an account and sign it in on the registering client."""
        username = validate_username(username)
        email = validate_email(email)
        validate_password(password)

        if await self._user_repo.get_by_email(email) is not None:
            raise AlreadyRegisteredError("Email already registered", field="email")
        if await self._user_repo.get_by_username(username) is not None:
            raise AlreadyRegisteredError("Username already taken", field="username")

        now = utcnow()
        user = User(
            user_id=str(uuid4()),
            username=username,
            email=email,
            password_hash=await self._hasher.hash(password),
            created_at=now,
            updated_at=now,
        )
        try:
            await self._user_repo.create_user(user)
        except ValueError as e:
            raise AlreadyRegisteredError(str(e)) from e
        logger.info("user registered", user_id=user.user_id, username=user.username)
        return await self._start_session(user, client)

    async def login(self, identifier: str, password: str, client: ClientInfo) -> LoginResult:
        """Validate credentials and open a new session.

        Unknown identifiers and wrong passwords fail identically so the
        response does not reveal which accounts exist.
        """
        user = await self._user_repo.get_by_identifier(identifier)
        if user is None:
            raise InvalidCredentialsError(_INVALID_CREDENTIALS)
        if not await self._hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError(_INVALID_CREDENTIALS)
        return await self._start_session(user, client)

    async def authenticate(self, token: str) -> Session:
        """Resolve a bearer token to its active session and record the activity.

        Raises UnauthenticatedError when the token does not verify and
        SessionTerminatedError when it verifies but its session was revoked.
        """
        try:
            claims = self._tokens.verify(token)
        except InvalidTokenError as e:
            raise UnauthenticatedError(str(e)) from e

        session = await self._sessions.find_active_by_token(token)
        if session is None or session.user_id != claims.user_id:
            raise SessionTerminatedError("Session has been terminated, please log in again")

        await self._sessions.touch_activity(session)
        return session

    async def logout(self, user_id: str, token: str) -> None:
        if await self._sessions.deactivate_token(user_id, token):
            logger.info("user logged out", user_id=user_id)

    async def get_profile(self, user_id: str) -> User:
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def change_password(self, user_id: str, current_password: str, new_password: str, current_token: str) -> int:
        """Replace the password and terminate every other session. Returns how many were terminated."""
        validate_password(new_password, field="newPassword")
        user = await self.get_profile(user_id)

        if not await self._hasher.verify(current_password, user.password_hash):
            raise IncorrectPasswordError("Current password is incorrect", field="currentPassword")
        if await self._hasher.verify(new_password, user.password_hash):
            raise ValidationFailedError(
                "New password must be different from current password",
                field="newPassword",
            )

        updated = user.model_copy(
            update={"password_hash": await self._hasher.hash(new_password), "updated_at": utcnow()},
        )
        await self._user_repo.update_user(updated)
        terminated = await self._sessions.terminate_all_others(user_id, current_token)
        logger.info("password changed", user_id=user_id, sessions_terminated=terminated)
        return terminated

    async def change_username(self, user_id: str, username: str) -> User:
        username = validate_username(username)
        user = await self.get_profile(user_id)

        existing = await self._user_repo.get_by_username(username)
        if existing is not None and existing.user_id != user_id:
            raise AlreadyRegisteredError("Username already taken", field="username")

        updated = user.model_copy(update={"username": username, "updated_at": utcnow()})
        await self._save_changes(updated)
        logger.info("username changed", user_id=user_id, username=username)
        return updated

    async def update_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        email: str | None = None,
        location: str | None = None,
        bio: str | None = None,
    ) -> User:
        """Update the provided profile fields. Empty full name, email, or location leave the field unchanged."""
        user = await self.get_profile(user_id)
        changes: dict[str, object] = {}

        if email:
            email = validate_email(email)
            existing = await self._user_repo.get_by_email(email)
            if existing is not None and existing.user_id != user_id:
                raise AlreadyRegisteredError("Email already registered", field="email")
            changes["email"] = email
        if full_name:
            changes["full_name"] = full_name.strip()
        if location:
            changes["location"] = location.strip()
        if bio is not None:
            changes["bio"] = validate_bio(bio)

        if not changes:
            return user
        changes["updated_at"] = utcnow()
        updated = user.model_copy(update=changes)
        await self._save_changes(updated)
        logger.info("profile updated", user_id=user_id, fields=sorted(changes))
        return updated

    async def delete_account(self, user_id: str, password: str) -> None:
        """Delete the account and everything that references it.

        Dependents go first (collections, follow edges in both directions,
        sessions) and the user record last.
        """
        user = await self.get_profile(user_id)
        if not await self._hasher.verify(password, user.password_hash):
            raise IncorrectPasswordError("Password is incorrect", field="password")

        try:
            collections = await self._collection_repo.delete_by_owner(user_id)
            follows = await self._follow_repo.delete_for_user(user_id)
            sessions = await self._sessions.terminate_all(user_id)
            await self._user_repo.delete_user(user_id)
        except Exception as e:
            logger.exception("account deletion failed", user_id=user_id)
            raise ServerError("An unexpected error occurred while deleting the account") from e

        logger.info(
            "account deleted",
            user_id=user_id,
            collections=collections,
            follows=follows,
            sessions=sessions,
        )

    # -- private helpers --

    async def _start_session(self, user: User, client: ClientInfo) -> LoginResult:
        token = self._tokens.issue(user.user_id)
        session = await self._sessions.create_for_client(user.user_id, token, client)
        logger.info("user signed in", user_id=user.user_id, session_id=session.session_id)
        return LoginResult(token=token, user=user, session=session)

    async def _save_changes(self, user: User) -> None:
        """Persist a changed user, wrapping uniqueness violations into AlreadyRegisteredError."""
        try:
            await self._user_repo.update_user(user)
        except ValueError as e:
            raise AlreadyRegisteredError(str(e)) from e
