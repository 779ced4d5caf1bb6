"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core import settings
from db.session import get_session
from models import User
from services.auth import (
    ACCESS_COOKIE,
    AccountService,
    CredentialStore,
    InvalidTokenError,
    MediaHost,
    MinioMediaHost,
    SqlCredentialStore,
    TokenService,
    UnauthorizedError,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_credential_store(session: AsyncSession = Depends(get_db)) -> CredentialStore:
    return SqlCredentialStore(session)


@lru_cache
def get_media_host() -> MediaHost:
    return MinioMediaHost()


@lru_cache
def get_token_service() -> TokenService:
    return TokenService.from_settings(settings)


def get_account_service(
    store: CredentialStore = Depends(get_credential_store),
    media_host: MediaHost = Depends(get_media_host),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(store, media_host, tokens)


def _bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("authorization")
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None


async def get_current_user(
    request: Request,
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Resolve the user owning the access token from the cookie or bearer header."""
    token = request.cookies.get(ACCESS_COOKIE) or _bearer_token(request)
    if not token:
        raise UnauthorizedError("Unauthorized request")

    user_id = tokens.verify_access_token(token)
    user = await store.get_by_id(user_id)
    if user is None:
        raise InvalidTokenError("Invalid access token")
    return user
