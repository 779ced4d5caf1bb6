"""User account model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func
from sqlmodel import Field, SQLModel

from core.security import hash_password, needs_rehash, verify_password

USERNAME_MAX_LENGTH = 30
EMAIL_MAX_LENGTH = 255
FULLNAME_MAX_LENGTH = 120


class User(SQLModel, table=True):
    """Registered account.

    ``password_hash`` and ``refresh_token_hash`` never leave the service layer;
    responses are built from :class:`services.auth.schemas.UserPublic`.
    """

    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    username: str = Field(
        sa_column=Column(String(USERNAME_MAX_LENGTH), unique=True, nullable=False, index=True)
    )
    email: str = Field(
        sa_column=Column(String(EMAIL_MAX_LENGTH), unique=True, nullable=False, index=True)
    )
    fullname: str = Field(sa_column=Column(String(FULLNAME_MAX_LENGTH), nullable=False, index=True))
    password_hash: str = Field(sa_column=Column(String(255), nullable=False))
    avatar: str = Field(sa_column=Column(String(1024), nullable=False))
    avatar_key: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True)
    )
    cover_image: str = Field(
        default="", sa_column=Column(String(1024), nullable=False, server_default="")
    )
    cover_image_key: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True)
    )
    # SHA-256 digest of the single refresh token currently allowed to renew the session.
    refresh_token_hash: str | None = Field(
        default=None, sa_column=Column(String(64), nullable=True)
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )

    def set_password(self, password: str) -> None:
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def password_needs_rehash(self) -> bool:
        return needs_rehash(self.password_hash)
