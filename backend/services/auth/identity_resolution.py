"""Identity normalization helpers."""

from __future__ import annotations

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_username(value: str) -> str:
    return value.strip().lower()


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value.strip())
    except PydanticValidationError:
        return False
    return True
