"""Tests for AuthSettings."""

import pytest
from pydantic import ValidationError

from core.auth.settings import AuthSettings


class TestAuthSettings:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("AUTH_JWT_SECRET", "from-env")
        monkeypatch.setenv("AUTH_TOKEN_TTL_SECONDS", "3600")
        monkeypatch.setenv("AUTH_PASSWORD_HASHER", "simple")

        settings = AuthSettings()

        assert settings.jwt_secret == "from-env"
        assert settings.token_ttl_seconds == 3600
        assert settings.password_hasher == "simple"

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("AUTH_JWT_SECRET", "s")
        monkeypatch.delenv("AUTH_TOKEN_TTL_SECONDS", raising=False)
        monkeypatch.delenv("AUTH_DATABASE_PATH", raising=False)
        monkeypatch.delenv("AUTH_PASSWORD_HASHER", raising=False)

        settings = AuthSettings()

        assert settings.token_ttl_seconds == 604800
        assert settings.database_path == "backend/storage.db"
        assert settings.password_hasher == "bcrypt"

    def test_secret_is_required(self, monkeypatch):
        monkeypatch.delenv("AUTH_JWT_SECRET", raising=False)

        with pytest.raises(ValidationError):
            AuthSettings()

    def test_empty_secret_is_rejected(self, monkeypatch):
        monkeypatch.setenv("AUTH_JWT_SECRET", "")

        with pytest.raises(ValidationError):
            AuthSettings()
