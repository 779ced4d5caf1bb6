"""MinIO client utilities."""

from __future__ import annotations

import mimetypes
from functools import lru_cache
from pathlib import Path

from minio import Minio
from minio.error import S3Error

from core import settings

MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound"})


@lru_cache
def get_minio_client() -> Minio:
    """Return a cached MinIO client configured from settings."""
    endpoint = settings.minio_endpoint
    access_key = settings.minio_access_key
    secret_key = settings.minio_secret_key
    secure = settings.minio_secure

    # Local development runs without TLS; production can override via endpoint/port.
    return Minio(
        endpoint,
        access_key=access_key,
        secret_key=secret_key,
        secure=secure,
    )


def ensure_bucket(client: Minio | None = None) -> None:
    """Ensure the configured bucket exists."""
    client = client or get_minio_client()
    bucket_name = settings.minio_bucket

    if client.bucket_exists(bucket_name):  # pragma: no cover - network call
        return

    try:
        client.make_bucket(bucket_name)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - handle race conditions
        allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
        if exc.code not in allowed_codes:
            raise


def upload_file(object_key: str, path: Path, client: Minio | None = None) -> None:
    """Upload a local file under ``object_key``."""
    client = client or get_minio_client()
    content_type, _ = mimetypes.guess_type(path.name)
    client.fput_object(
        settings.minio_bucket,
        object_key,
        str(path),
        content_type=content_type or "application/octet-stream",
    )  # pragma: no cover - network call


def delete_object(object_key: str, client: Minio | None = None) -> None:
    """Delete an object from the configured bucket when it exists."""
    client = client or get_minio_client()
    try:
        client.remove_object(settings.minio_bucket, object_key)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - network call
        if exc.code not in MISSING_OBJECT_CODES:
            raise


def public_object_url(object_key: str) -> str:
    """Return the URL clients use to fetch ``object_key``."""
    normalized_object_key = object_key.strip().lstrip("/")
    if not normalized_object_key:
        raise ValueError("object_key must not be empty")

    base_url = settings.media_public_base_url.strip().rstrip("/")
    if not base_url:
        scheme = "https" if settings.minio_secure else "http"
        base_url = f"{scheme}://{settings.minio_endpoint}"
    return f"{base_url}/{settings.minio_bucket}/{normalized_object_key}"
