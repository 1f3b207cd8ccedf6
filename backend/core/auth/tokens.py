"""Signed bearer tokens (JWT, HS256) bound to a user id.

Token claims: ``userId``, ``iat``, ``exp`` and a random ``jti`` so that two
tokens issued to the same user within the same second still differ; the
session registry keys sessions on the token string.

The issuer is stateless. Its secret is injected once at startup; rotating
the secret invalidates every token issued before.
"""

import secrets
import time
from dataclasses import dataclass

import jwt
import structlog

logger = structlog.get_logger()

TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days
TOKEN_ALGORITHM = "HS256"

_REQUIRED_CLAIMS = ["userId", "iat", "exp"]


class InvalidTokenError(Exception):
    """Signature mismatch, expiry, or a payload without the expected claims."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: int
    expires_at: int


class TokenIssuer:
    """Issue and verify bearer tokens with a process-wide secret."""

    def __init__(self, secret: str, ttl_seconds: int = TOKEN_TTL_SECONDS, algorithm: str = TOKEN_ALGORITHM) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._algorithm = algorithm

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, user_id: str) -> str:
        """Return a signed token for user_id, valid for the configured TTL."""
        now = int(time.time())
        payload = {
            "userId": user_id,
            "iat": now,
            "exp": now + self._ttl_seconds,
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Return the token's claims. Raises InvalidTokenError on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            logger.debug("bearer token expired")
            raise InvalidTokenError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("bearer token rejected", reason=type(exc).__name__)
            raise InvalidTokenError("Invalid token") from exc

        user_id = payload["userId"]
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Invalid token")
        return TokenClaims(user_id=user_id, issued_at=int(payload["iat"]), expires_at=int(payload["exp"]))
