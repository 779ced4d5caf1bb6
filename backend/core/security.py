"""Password hashing and JWT signing primitives."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from .config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except (UnknownHashError, ValueError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return pwd_context.needs_update(password_hash)


def encode_token(
    claims: dict[str, Any],
    *,
    secret: str,
    expires_delta: timedelta,
    algorithm: str = "HS256",
) -> str:
    """Sign ``claims`` adding ``iat`` and ``exp``."""
    issued_at = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = issued_at
    payload["exp"] = issued_at + expires_delta
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, *, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Decode and verify a signed token.

    Raises ``ValueError`` for malformed, expired or mis-signed tokens.
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.PyJWTError as exc:
        raise ValueError("Invalid token") from exc
