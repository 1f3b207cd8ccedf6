"""Session registry: the source of truth for whether an issued token is still honored."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from core.auth.device import detect_device
from core.auth.models import ClientInfo, Session, SessionView
from core.dal.errors import StorageError
from core.errors import CannotTerminateCurrentError, NotFoundError

if TYPE_CHECKING:
    from core.auth.models import DeviceInfo
    from core.dal.session_repository import SessionRepository

logger = structlog.get_logger()


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SessionRegistry:
    """Create, look up, and revoke sessions.

    A session is revoked by flipping ``is_active`` to False; rows are kept
    for audit. Revocation takes effect on the next request presenting the
    token, never on one already in flight.
    """

    def __init__(self, session_repo: SessionRepository) -> None:
        self._repo = session_repo

    async def create_session(
        self,
        user_id: str,
        token: str,
        device_info: DeviceInfo,
        ip_address: str,
        location: str,
    ) -> Session:
        """Persist a new active session bound to token."""
        now = utcnow()
        session = Session(
            session_id=str(uuid4()),
            user_id=user_id,
            token=token,
            device_info=device_info,
            ip_address=ip_address,
            location=location,
            is_active=True,
            last_active=now,
            created_at=now,
        )
        await self._repo.create_session(session)
        logger.info(
            "session created",
            user_id=user_id,
            session_id=session.session_id,
            device=device_info.device_name,
        )
        return session

    async def create_for_client(self, user_id: str, token: str, client: ClientInfo) -> Session:
        """Create a session, deriving the device descriptor from the client's user agent."""
        return await self.create_session(
            user_id,
            token,
            detect_device(client.user_agent),
            client.ip_address,
            client.location,
        )

    async def find_active_by_token(self, token: str) -> Session | None:
        return await self._repo.get_active_by_token(token)

    async def touch_activity(self, session: Session) -> StorageError | None:
        """Set last activity to now.

        Failures are logged and returned to the caller instead of raised, so
        a failed update never fails the request that triggered it.
        """
        try:
            await self._repo.touch(session.session_id, utcnow())
        except StorageError as exc:
            logger.warning("session activity update failed", session_id=session.session_id, error=str(exc))
            return exc
        return None

    async def list_active(self, user_id: str, current_token: str) -> list[SessionView]:
        """Active sessions for user_id, newest activity first, flagging the caller's own."""
        sessions = await self._repo.list_active_for_user(user_id)
        return [SessionView(session=s, is_current_session=s.token == current_token) for s in sessions]

    async def terminate(self, session_id: str, user_id: str, current_token: str) -> None:
        """Deactivate one of user_id's sessions other than the caller's own."""
        session = await self._repo.get_for_user(session_id, user_id)
        if session is None:
            raise NotFoundError("Session not found")
        if session.token == current_token:
            raise CannotTerminateCurrentError("Use logout to end the current session")
        await self._repo.deactivate(session_id)
        logger.info("session terminated", user_id=user_id, session_id=session_id)

    async def terminate_all_others(self, user_id: str, except_token: str) -> int:
        """Deactivate every active session of user_id except the one holding except_token."""
        count = await self._repo.deactivate_all_except(user_id, except_token)
        logger.info("other sessions terminated", user_id=user_id, count=count)
        return count

    async def deactivate_token(self, user_id: str, token: str) -> bool:
        """Deactivate the session holding token (logout)."""
        return await self._repo.deactivate_token(user_id, token)

    async def terminate_all(self, user_id: str) -> int:
        """Deactivate every active session of user_id, the caller's included."""
        count = await self._repo.deactivate_all(user_id)
        logger.info("all sessions terminated", user_id=user_id, count=count)
        return count
