"""Account and session error taxonomy.

Each error carries the HTTP status it maps to; the API layer renders every
subclass with the same JSON envelope.
"""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import status


class AccountError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, errors: Sequence[str] = ()) -> None:
        self.message = message or self.default_message
        self.errors = list(errors)
        super().__init__(self.message)


class ValidationError(AccountError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required"


class UnauthorizedError(AccountError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid or expired token"


class NotFoundError(AccountError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class ConflictError(AccountError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User with email or username already exists"


class PayloadTooLargeError(AccountError):
    status_code = 413
    default_message = "File is too large"


class UploadError(AccountError):
    default_message = "Failed to upload file"


class InternalError(AccountError):
    pass


class MediaHostError(Exception):
    """Raised by media host implementations when a remote call fails."""


class StoreError(Exception):
    """Raised by credential stores when persistence fails."""


class DuplicateUserError(StoreError):
    """Raised when a write collides with an existing username or email."""

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields
