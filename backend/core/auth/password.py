"""Password hashers.

Services depend on the ``PasswordHasher`` protocol. ``BcryptHasher`` is the
production implementation; ``SimpleHasher`` trades all security for speed
and exists for test suites.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Protocol, runtime_checkable

import bcrypt
from anyio import to_thread

BCRYPT_ROUNDS = 10
BCRYPT_MAX_BYTES = 72


@runtime_checkable
class PasswordHasher(Protocol):
    async def hash(self, plain: str) -> str: ...

    async def verify(self, plain: str, hashed: str) -> bool: ...


class BcryptHasher:
    """bcrypt with a configurable cost factor.

    Hashing and checking are CPU-bound, so both run in a worker thread via
    anyio to keep the event loop responsive while a login is in progress.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    async def hash(self, plain: str) -> str:
        secret = _encode(plain)
        hashed = await to_thread.run_sync(bcrypt.hashpw, secret, bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("ascii")

    async def verify(self, plain: str, hashed: str) -> bool:
        """Check plain against hashed; malformed hashes and over-long passwords never match."""
        try:
            secret = _encode(plain)
            return await to_thread.run_sync(bcrypt.checkpw, secret, hashed.encode("ascii"))
        except ValueError:
            return False


def _encode(plain: str) -> bytes:
    secret = plain.encode("utf-8")
    if len(secret) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password exceeds {BCRYPT_MAX_BYTES} bytes")
    return secret


_SIMPLE_SCHEME = "sha256$"


class SimpleHasher:
    """Unsalted SHA-256. Never use outside tests."""

    async def hash(self, plain: str) -> str:
        return _SIMPLE_SCHEME + hashlib.sha256(plain.encode("utf-8")).hexdigest()

    async def verify(self, plain: str, hashed: str) -> bool:
        return hmac.compare_digest(await self.hash(plain), hashed)


_HASHERS: dict[str, type[BcryptHasher] | type[SimpleHasher]] = {
    "bcrypt": BcryptHasher,
    "simple": SimpleHasher,
}


def get_hasher(name: str = "bcrypt") -> PasswordHasher:
    """Build the hasher named by AUTH_PASSWORD_HASHER."""
    try:
        return _HASHERS[name]()
    except KeyError:
        raise ValueError(f"Unknown password hasher: {name!r}") from None
