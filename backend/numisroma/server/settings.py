"""API server configuration via NUMISROMA_* environment variables."""

from typing import ClassVar

from pydantic import field_validator

from core.validators import StringListSettings, parse_string_list


class ApiServerSettings(StringListSettings):
    model_config = {"env_prefix": "NUMISROMA_"}
    string_list_fields: ClassVar[frozenset[str]] = frozenset({"cors_origins"})

    log_dir: str = "backend/logs/api"
    # Browser origins allowed to call the API; empty disables CORS responses.
    cors_origins: list[str] = []

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)
