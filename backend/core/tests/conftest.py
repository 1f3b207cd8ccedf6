"""Shared fixtures for core tests: a fresh SQLite database per test and services wired over it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from core.auth.models import ClientInfo
from core.auth.password import SimpleHasher
from core.auth.service import AuthService
from core.auth.session_registry import SessionRegistry
from core.auth.tokens import TokenIssuer
from core.db import (
    Database,
    SqliteCollectionRepository,
    SqliteFollowRepository,
    SqliteMessageRepository,
    SqliteSessionRepository,
    SqliteUserRepository,
)

if TYPE_CHECKING:
    from pathlib import Path

TEST_SECRET = "core-test-secret-0123456789abcdef0123"
STRONG_PASSWORD = "Denarius#1"

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.5 Mobile/15E148 Safari/604.1"
)
WINDOWS_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "test.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def user_repo(db):
    return SqliteUserRepository(db)


@pytest.fixture
def session_repo(db):
    return SqliteSessionRepository(db)


@pytest.fixture
def collection_repo(db):
    return SqliteCollectionRepository(db)


@pytest.fixture
def follow_repo(db):
    return SqliteFollowRepository(db)


@pytest.fixture
def message_repo(db):
    return SqliteMessageRepository(db)


@pytest.fixture
def registry(session_repo):
    return SessionRegistry(session_repo)


@pytest.fixture
def token_issuer():
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def auth_service(user_repo, registry, token_issuer, collection_repo, follow_repo):
    return AuthService(
        user_repo,
        registry,
        token_issuer,
        password_hasher=SimpleHasher(),
        collection_repo=collection_repo,
        follow_repo=follow_repo,
    )


@pytest.fixture
def desktop_client():
    return ClientInfo(user_agent=WINDOWS_CHROME_UA, ip_address="203.0.113.7", location="Rome")


@pytest.fixture
def phone_client():
    return ClientInfo(user_agent=IPHONE_UA, ip_address="198.51.100.2")


@pytest.fixture
async def alice(auth_service, desktop_client):
    """A registered user; the result carries the registration session's token."""
    return await auth_service.register("alice", "alice@example.com", STRONG_PASSWORD, desktop_client)


@pytest.fixture
async def bob(auth_service, desktop_client):
    return await auth_service.register("bob", "bob@example.com", STRONG_PASSWORD, desktop_client)
