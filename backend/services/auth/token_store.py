"""Refresh-token digest helpers."""

from __future__ import annotations

import hashlib
import hmac


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_matches(token: str, stored_hash: str | None) -> bool:
    """Return True when ``token`` is the one recorded as ``stored_hash``."""
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_refresh_token(token), stored_hash)
