"""Access and refresh token issuance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from uuid import uuid4

from core import Settings, decode_token, encode_token

from .errors import InvalidTokenError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenService:
    """Signs and verifies the two token classes with separate secrets."""

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta
    refresh_ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, config: Settings) -> TokenService:
        return cls(
            access_secret=config.access_token_secret,
            refresh_secret=config.refresh_token_secret,
            access_ttl=timedelta(minutes=config.access_token_expire_minutes),
            refresh_ttl=timedelta(days=config.refresh_token_expire_days),
            algorithm=config.jwt_algorithm,
        )

    def issue_access_token(self, user_id: str, **claims: Any) -> str:
        payload = {**claims, "sub": user_id, "type": ACCESS_TOKEN_TYPE}
        return encode_token(
            payload,
            secret=self.access_secret,
            expires_delta=self.access_ttl,
            algorithm=self.algorithm,
        )

    def issue_refresh_token(self, user_id: str) -> str:
        # jti keeps two tokens minted within the same second distinct.
        payload = {"sub": user_id, "type": REFRESH_TOKEN_TYPE, "jti": uuid4().hex}
        return encode_token(
            payload,
            secret=self.refresh_secret,
            expires_delta=self.refresh_ttl,
            algorithm=self.algorithm,
        )

    def verify_token(self, token: str, secret: str, *, expected_type: str) -> str:
        """Return the user id embedded in ``token``."""
        try:
            payload = decode_token(token, secret=secret, algorithm=self.algorithm)
        except ValueError as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != expected_type:
            raise InvalidTokenError()

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            raise InvalidTokenError()
        return subject

    def verify_access_token(self, token: str) -> str:
        return self.verify_token(token, self.access_secret, expected_type=ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> str:
        return self.verify_token(token, self.refresh_secret, expected_type=REFRESH_TOKEN_TYPE)
