"""Business logic services."""

from .rate_limiter import (
    RateLimitMiddleware,
    RateLimiter,
    get_rate_limiter,
    set_rate_limiter,
)
from .storage import (
    delete_object,
    ensure_bucket,
    get_minio_client,
    public_object_url,
    upload_file,
)

__all__ = [
    "get_minio_client",
    "ensure_bucket",
    "delete_object",
    "public_object_url",
    "upload_file",
    "RateLimiter",
    "RateLimitMiddleware",
    "get_rate_limiter",
    "set_rate_limiter",
]
