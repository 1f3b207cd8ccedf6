"""User account and session models for authentication."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from core.dal.models import Document


class User(Document):
    """User account stored in the user repository."""

    user_id: str
    username: str
    email: str  # always lowercase
    password_hash: str  # bcrypt hash
    full_name: str | None = None
    avatar: str | None = None
    bio: str | None = None
    location: str | None = None
    follows: list[str] = Field(default_factory=list)  # legacy, superseded by follow edges
    created_at: datetime
    updated_at: datetime

    def to_public(self) -> dict[str, Any]:
        """Wire representation without the password hash."""
        return self.to_wire(exclude={"password_hash"})


class DeviceType(StrEnum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"
    UNKNOWN = "unknown"


class DeviceInfo(Document):
    type: DeviceType = DeviceType.UNKNOWN
    operating_system: str = "unknown"
    browser: str = "unknown"
    device_name: str = "Unknown device"


class Session(Document):
    """Server-side record of an issued bearer token.

    ``is_active`` is the only revocation state: sessions are deactivated,
    never deleted.
    """

    session_id: str
    user_id: str
    token: str  # unique across all sessions
    device_info: DeviceInfo = Field(default_factory=DeviceInfo)
    ip_address: str = "unknown"
    location: str = "Unknown"
    is_active: bool = True
    last_active: datetime
    created_at: datetime


@dataclass
class SessionView:
    """A session as listed to its owner, flagged when it belongs to the caller's token."""

    session: Session
    is_current_session: bool

    def to_wire(self) -> dict[str, Any]:
        data = self.session.to_wire(exclude={"token"})
        data["isCurrentSession"] = self.is_current_session
        return data


@dataclass
class ClientInfo:
    """Request metadata recorded on a new session."""

    user_agent: str = ""
    ip_address: str = "unknown"
    location: str = "Unknown"


@dataclass
class LoginResult:
    token: str
    user: User
    session: Session
