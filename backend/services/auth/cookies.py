"""HTTP cookie helpers for auth token transport."""

from __future__ import annotations

from typing import Literal

from fastapi import Response

from core import settings

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
COOKIE_PATH = "/"
COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"


def cookie_secure() -> bool:
    return settings.is_production


def _access_max_age() -> int:
    return settings.access_token_expire_minutes * 60


def _refresh_max_age() -> int:
    return settings.refresh_token_expire_days * 24 * 60 * 60


def set_token_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    secure = cookie_secure()
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=access_token,
        httponly=True,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=_access_max_age(),
        path=COOKIE_PATH,
    )
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh_token,
        httponly=True,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=_refresh_max_age(),
        path=COOKIE_PATH,
    )


def clear_token_cookies(response: Response) -> None:
    secure = cookie_secure()
    response.delete_cookie(
        key=ACCESS_COOKIE,
        path=COOKIE_PATH,
        secure=secure,
        httponly=True,
        samesite=COOKIE_SAMESITE,
    )
    response.delete_cookie(
        key=REFRESH_COOKIE,
        path=COOKIE_PATH,
        secure=secure,
        httponly=True,
        samesite=COOKIE_SAMESITE,
    )
