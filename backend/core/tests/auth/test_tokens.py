"""Tests for TokenIssuer."""

import time

import jwt
import pytest

from core.auth.tokens import TOKEN_TTL_SECONDS, InvalidTokenError, TokenIssuer

SECRET = "token-test-secret-0123456789abcdef012"


class TestIssue:
    def test_token_carries_user_and_seven_day_expiry(self):
        issuer = TokenIssuer(SECRET)
        claims = issuer.verify(issuer.issue("user-1"))

        assert claims.user_id == "user-1"
        assert claims.expires_at - claims.issued_at == TOKEN_TTL_SECONDS
        assert TOKEN_TTL_SECONDS == 604800

    def test_payload_uses_user_id_claim(self):
        token = TokenIssuer(SECRET).issue("user-1")
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert payload["userId"] == "user-1"
        assert {"iat", "exp", "jti"} <= payload.keys()

    def test_tokens_issued_in_same_second_differ(self):
        issuer = TokenIssuer(SECRET)
        assert issuer.issue("user-1") != issuer.issue("user-1")

    def test_rejects_empty_secret(self):
        with pytest.raises(ValueError, match="must not be empty"):
            TokenIssuer("")


class TestVerify:
    def test_rejects_token_signed_with_other_secret(self):
        token = TokenIssuer("another-secret-0123456789abcdef01234").issue("user-1")

        with pytest.raises(InvalidTokenError):
            TokenIssuer(SECRET).verify(token)

    def test_rejects_expired_token(self):
        now = int(time.time())
        token = jwt.encode({"userId": "user-1", "iat": now - 100, "exp": now - 10}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError, match="expired"):
            TokenIssuer(SECRET).verify(token)

    def test_rejects_garbage(self):
        with pytest.raises(InvalidTokenError):
            TokenIssuer(SECRET).verify("not-a-jwt")

    def test_rejects_token_without_user_id(self):
        now = int(time.time())
        token = jwt.encode({"sub": "user-1", "iat": now, "exp": now + 60}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            TokenIssuer(SECRET).verify(token)

    def test_rejects_non_string_user_id(self):
        now = int(time.time())
        token = jwt.encode({"userId": 42, "iat": now, "exp": now + 60}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            TokenIssuer(SECRET).verify(token)

    def test_rejects_unsigned_token(self):
        now = int(time.time())
        token = jwt.encode({"userId": "user-1", "iat": now, "exp": now + 60}, None, algorithm="none")

        with pytest.raises(InvalidTokenError):
            TokenIssuer(SECRET).verify(token)
