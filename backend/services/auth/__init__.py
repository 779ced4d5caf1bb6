"""Authentication domain services."""

from .accounts import AccountService, public_view
from .cookies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    clear_token_cookies,
    set_token_cookies,
)
from .credential_store import CredentialStore, SqlCredentialStore
from .errors import (
    AccountError,
    ConflictError,
    DuplicateUserError,
    InternalError,
    InvalidTokenError,
    MediaHostError,
    NotFoundError,
    PayloadTooLargeError,
    StoreError,
    UnauthorizedError,
    UploadError,
    ValidationError,
)
from .media_host import MediaHost, MinioMediaHost, StoredMedia
from .token_store import hash_refresh_token, refresh_token_matches
from .tokens import TokenService

__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "AccountError",
    "AccountService",
    "ConflictError",
    "CredentialStore",
    "DuplicateUserError",
    "InternalError",
    "InvalidTokenError",
    "MediaHost",
    "MediaHostError",
    "MinioMediaHost",
    "NotFoundError",
    "PayloadTooLargeError",
    "SqlCredentialStore",
    "StoreError",
    "StoredMedia",
    "TokenService",
    "UnauthorizedError",
    "UploadError",
    "ValidationError",
    "clear_token_cookies",
    "hash_refresh_token",
    "public_view",
    "refresh_token_matches",
    "set_token_cookies",
]
