"""Auth settings read from AUTH_* environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from core.auth.tokens import TOKEN_TTL_SECONDS


class AuthSettings(BaseSettings):
    model_config = {"env_prefix": "AUTH_"}

    # HMAC secret for signing bearer tokens -- required, no default.
    # The application fails to start if AUTH_JWT_SECRET is not set.
    jwt_secret: str = Field(min_length=1)

    # Token lifetime; a session outlives its token only as an audit record.
    token_ttl_seconds: int = Field(default=TOKEN_TTL_SECONDS, gt=0)

    # SQLite database file path
    database_path: str = "backend/storage.db"

    # "bcrypt" in production; "simple" keeps test suites fast.
    password_hasher: str = "bcrypt"
