"""Core configuration and security helpers."""

from .config import Settings, settings
from .log_config import configure_logging
from .security import (
    decode_token,
    encode_token,
    hash_password,
    needs_rehash,
    verify_password,
)

__all__ = [
    "Settings",
    "settings",
    "configure_logging",
    "decode_token",
    "encode_token",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
