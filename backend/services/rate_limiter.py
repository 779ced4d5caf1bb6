"""Redis-backed rate limiting for the credential endpoints."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from functools import lru_cache
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network, ip_address, ip_network
from typing import Callable, Protocol, runtime_checkable

from fastapi import status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.types import ASGIApp

from core import settings

logger = logging.getLogger(__name__)

FORWARDED_FOR_HEADER = "x-forwarded-for"
PROTECTED_PATHS = frozenset(
    {
        "/api/v1/users/login",
        "/api/v1/users/register",
        "/api/v1/users/refresh-token",
    }
)


@runtime_checkable
class SupportsRateLimitClient(Protocol):
    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl: int) -> None: ...


@lru_cache
def _trusted_proxy_networks() -> tuple[IPv4Network | IPv6Network, ...]:
    networks: list[IPv4Network | IPv6Network] = []
    for cidr in settings.rate_limit_trusted_proxies:
        try:
            networks.append(ip_network(cidr, strict=False))
        except ValueError as exc:  # pragma: no cover - invalid configuration
            raise ValueError(f"Invalid CIDR in RATE_LIMIT_TRUSTED_PROXIES: {cidr}") from exc
    return tuple(networks)


def _remote_ip(request: Request) -> tuple[str | None, IPv4Address | IPv6Address | None]:
    host = request.client.host if request.client else None
    if not host:
        return None, None
    try:
        addr = ip_address(host)
    except ValueError:
        return host, None
    return host, addr


def _is_trusted_proxy(remote_ip: IPv4Address | IPv6Address | None) -> bool:
    if remote_ip is None:
        return False
    return any(remote_ip in network for network in _trusted_proxy_networks())


def _forwarded_client_ip(request: Request) -> str | None:
    value = request.headers.get(FORWARDED_FOR_HEADER)
    if not value:
        return None
    for candidate in value.split(","):
        ip_candidate = candidate.strip()
        try:
            ip_address(ip_candidate)
        except ValueError:
            continue
        return ip_candidate
    return None


def default_client_identifier(request: Request) -> str:
    """Resolve a stable client identifier for rate limiting."""
    remote_host, remote_ip = _remote_ip(request)

    # Forwarded headers are only honoured from configured proxy networks.
    if _is_trusted_proxy(remote_ip):
        forwarded_ip = _forwarded_client_ip(request)
        if forwarded_ip:
            return forwarded_ip

    return remote_host or "anonymous"


class RateLimiter:
    """Simple fixed-window rate limiter backed by Redis."""

    def __init__(
        self,
        redis_client: SupportsRateLimitClient,
        limit: int,
        window_seconds: int,
        prefix: str = "rate-limit",
    ) -> None:
        self.redis = redis_client
        self.limit = max(limit, 0)
        self.window_seconds = max(window_seconds, 0)
        self.prefix = prefix

    async def allow(self, key: str) -> bool:
        """Return True when the request should be allowed, False if limited."""
        if self.limit == 0 or self.window_seconds == 0:
            return True

        bucket = int(time.time()) // self.window_seconds
        redis_key = f"{self.prefix}:{key}:{bucket}"

        count = await self.redis.incr(redis_key)
        if count == 1:
            await self.redis.expire(redis_key, self.window_seconds)
        return count <= self.limit


@lru_cache
def get_redis_client() -> SupportsRateLimitClient:
    """Return a cached async Redis client."""
    return Redis.from_url(settings.redis_url, decode_responses=False)


_cached_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Singleton accessor for the shared rate limiter."""
    global _cached_rate_limiter
    if _cached_rate_limiter is None:
        _cached_rate_limiter = RateLimiter(
            redis_client=get_redis_client(),
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _cached_rate_limiter


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Override the cached rate limiter (primarily for tests)."""
    global _cached_rate_limiter
    _cached_rate_limiter = limiter


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {"statusCode": status_code, "message": message, "success": False, "errors": []},
        status_code=status_code,
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Enforces the configured limit on credential endpoints."""

    def __init__(
        self,
        app: ASGIApp,
        limiter_factory: Callable[[], RateLimiter],
        protected_paths: Iterable[str] = PROTECTED_PATHS,
        client_identifier: Callable[[Request], str] | None = None,
        fail_open: bool | None = None,
    ) -> None:
        super().__init__(app)
        self.limiter_factory = limiter_factory
        self.protected_paths = frozenset(protected_paths)
        self.client_identifier = client_identifier or default_client_identifier
        self.fail_open = settings.rate_limit_fail_open if fail_open is None else fail_open

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        if request.url.path not in self.protected_paths:
            return await call_next(request)

        client_key = self.client_identifier(request) or "anonymous"
        try:
            is_allowed = await self.limiter_factory().allow(client_key)
        except RedisError as exc:
            if self.fail_open:
                logger.warning("Rate limiter unavailable, allowing request", exc_info=exc)
                return await call_next(request)
            logger.error("Rate limiter unavailable", exc_info=exc)
            return _envelope(status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable")

        if not is_allowed:
            logger.warning("Rate limit exceeded", extra={"client": client_key})
            return _envelope(status.HTTP_429_TOO_MANY_REQUESTS, "Too Many Requests")

        return await call_next(request)
