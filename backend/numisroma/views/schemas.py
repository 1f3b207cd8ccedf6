"""Request bodies accepted by the API.

Bodies use camelCase keys on the wire; snake_case is accepted too. Account
fields are checked with the same rules the auth service applies.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.auth import validation
from core.dal.models import MessageType
from core.errors import ValidationFailedError

if TYPE_CHECKING:
    from collections.abc import Callable

COLLECTION_NAME_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 2000
_HTTP_URL = re.compile(r"^https?://\S+$")


def _check(rule: Callable[[str], str], value: str) -> str:
    """Run an account rule, surfacing its message as a pydantic error."""
    try:
        return rule(value)
    except ValidationFailedError as e:
        raise ValueError(e.message) from e


def _optional_http_url(value: str | None) -> str | None:
    """Blank means no URL; anything else must be an http(s) URL."""
    if value is None or not value.strip():
        return None
    if not _HTTP_URL.match(value.strip()):
        raise ValueError("Must be a valid http(s) URL")
    return value.strip()


OptionalUrl = Annotated[str | None, AfterValidator(_optional_http_url)]


class RequestBody(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(RequestBody):
    username: str
    email: str
    password: str
    location: str | None = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return _check(validation.validate_username, v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check(validation.validate_email, v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return _check(validation.validate_password, v)


class LoginRequest(RequestBody):
    """``identifier`` is an email or a username; ``email`` and ``username`` keys are accepted for it."""

    identifier: str = Field(min_length=1, validation_alias=AliasChoices("identifier", "email", "username"))
    password: str = Field(min_length=1)
    location: str | None = None


class ChangePasswordRequest(RequestBody):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return _check(validation.validate_password, v)


class ChangeUsernameRequest(RequestBody):
    username: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return _check(validation.validate_username, v)


class UpdateProfileRequest(RequestBody):
    full_name: str | None = None
    email: str | None = None
    location: str | None = None
    bio: str | None = Field(default=None, max_length=validation.BIO_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        if not v:
            return v
        return _check(validation.validate_email, v)


class DeleteAccountRequest(RequestBody):
    password: str = Field(min_length=1)


class CreateCollectionRequest(RequestBody):
    name: str = Field(min_length=1, max_length=COLLECTION_NAME_MAX_LENGTH)
    description: str | None = None
    image: OptionalUrl = None
    is_public: bool = False


class UpdateCollectionRequest(RequestBody):
    name: str | None = Field(default=None, min_length=1, max_length=COLLECTION_NAME_MAX_LENGTH)
    description: str | None = None
    image: OptionalUrl = None
    is_public: bool | None = None

    @field_validator("name", "is_public", mode="before")
    @classmethod
    def reject_null(cls, v: object) -> object:
        """Omit a field to leave it unchanged; ``null`` is not a value for these."""
        if v is None:
            raise ValueError("Must not be null")
        return v


class CoinMeasurements(RequestBody):
    weight: float | None = Field(default=None, ge=0)
    diameter: float | None = Field(default=None, ge=0)
    grade: str | None = None
    notes: str | None = None


class AddCoinRequest(CoinMeasurements):
    coin_id: str = Field(min_length=1, validation_alias=AliasChoices("coinId", "coin_id", "coin"))


class SendMessageRequest(RequestBody):
    content: str = Field(min_length=1, max_length=MESSAGE_MAX_LENGTH)
    message_type: MessageType = MessageType.TEXT
    image_url: OptionalUrl = None
