"""Session-backed bearer token authentication and account lifecycle."""

from core.auth.device import detect_device
from core.auth.models import ClientInfo, DeviceInfo, DeviceType, LoginResult, Session, SessionView, User
from core.auth.password import BcryptHasher, PasswordHasher, SimpleHasher, get_hasher
from core.auth.service import AuthService
from core.auth.session_registry import SessionRegistry
from core.auth.settings import AuthSettings
from core.auth.tokens import TOKEN_TTL_SECONDS, InvalidTokenError, TokenClaims, TokenIssuer

__all__ = [
    "TOKEN_TTL_SECONDS",
    "AuthService",
    "AuthSettings",
    "BcryptHasher",
    "ClientInfo",
    "DeviceInfo",
    "DeviceType",
    "InvalidTokenError",
    "LoginResult",
    "PasswordHasher",
    "Session",
    "SessionRegistry",
    "SessionView",
    "SimpleHasher",
    "TokenClaims",
    "TokenIssuer",
    "User",
    "detect_device",
    "get_hasher",
]
