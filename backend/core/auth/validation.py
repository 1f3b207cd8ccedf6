"""Input shape rules for account fields.

Each validator returns the normalized value or raises ValidationFailedError
naming the offending field.
"""

import re

from core.errors import ValidationFailedError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = 72  # bcrypt truncates at 72 bytes
PASSWORD_SYMBOLS = "!@#$%^&*"

BIO_MAX_LENGTH = 500


def validate_username(username: str) -> str:
    """Validate username: 3-30 chars, letters, digits, and underscores."""
    username = username.strip()
    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        raise ValidationFailedError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
            field="username",
        )
    if not USERNAME_PATTERN.match(username):
        raise ValidationFailedError("Username must contain only letters, numbers, and underscores", field="username")
    return username


def validate_email(email: str) -> str:
    """Validate email shape and return it trimmed and lowercased."""
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailedError("Invalid email address", field="email")
    return email


def validate_password(password: str, field: str = "password") -> str:
    """Enforce the password policy.

    At least 8 characters with one uppercase letter, one digit, and one
    symbol from ``!@#$%^&*``; at most 72 bytes when UTF-8 encoded.
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationFailedError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters", field=field)
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationFailedError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded", field=field)
    if not any(ch.isupper() for ch in password):
        raise ValidationFailedError("Password must contain at least one uppercase letter", field=field)
    if not any(ch.isdigit() for ch in password):
        raise ValidationFailedError("Password must contain at least one number", field=field)
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        raise ValidationFailedError(
            f"Password must contain at least one special character ({PASSWORD_SYMBOLS})",
            field=field,
        )
    return password


def validate_bio(bio: str) -> str:
    if len(bio) > BIO_MAX_LENGTH:
        raise ValidationFailedError(f"Bio must not exceed {BIO_MAX_LENGTH} characters", field="bio")
    return bio
