"""Media host adapter for avatar and cover images."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from minio.error import S3Error

from services import storage

from .errors import MediaHostError


@dataclass(frozen=True)
class StoredMedia:
    url: str
    key: str


class MediaHost(Protocol):
    async def upload(self, path: Path, *, folder: str) -> StoredMedia: ...

    async def delete(self, key: str) -> None: ...


class MinioMediaHost:
    """Stores files in the configured MinIO bucket.

    The object key doubles as the media identifier used for deletion.
    """

    def __init__(self, client_factory=storage.get_minio_client) -> None:
        self._client_factory = client_factory
        self._bucket_checked = False

    async def upload(self, path: Path, *, folder: str) -> StoredMedia:
        object_key = f"{folder.strip('/')}/{uuid4().hex}{path.suffix.lower()}"
        try:
            await asyncio.to_thread(self._put, object_key, path)
        except (S3Error, OSError, ValueError) as exc:
            raise MediaHostError(f"Upload of {path.name} failed") from exc
        return StoredMedia(url=storage.public_object_url(object_key), key=object_key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(storage.delete_object, key, self._client_factory())
        except (S3Error, OSError) as exc:
            raise MediaHostError(f"Delete of {key} failed") from exc

    def _put(self, object_key: str, path: Path) -> None:
        client = self._client_factory()
        if not self._bucket_checked:
            storage.ensure_bucket(client)
            self._bucket_checked = True
        storage.upload_file(object_key, path, client)
