"""Spooling of multipart uploads to local temporary files."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import UploadFile

from core import settings
from services.auth.errors import PayloadTooLargeError

CHUNK_SIZE = 64 * 1024
logger = logging.getLogger(__name__)


async def spool_upload_file(upload: UploadFile, max_bytes: int, directory: Path) -> Path:
    """Copy ``upload`` into ``directory`` and return the local path.

    Raises ``PayloadTooLargeError`` once more than ``max_bytes`` were read.
    """
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()
    fd, raw_path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=directory)
    path = Path(raw_path)
    written = 0
    try:
        with os.fdopen(fd, "wb") as handle:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLargeError(
                        f"File exceeds maximum size of {max_bytes} bytes"
                    )
                handle.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path


@asynccontextmanager
async def spooled_upload(upload: UploadFile | None) -> AsyncIterator[Path | None]:
    """Yield a local copy of ``upload`` and remove it afterwards.

    Yields ``None`` when no file was sent.
    """
    if upload is None or not upload.filename:
        yield None
        return

    path = await spool_upload_file(
        upload,
        settings.upload_max_bytes,
        Path(settings.upload_temp_dir),
    )
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning(
                "Failed to remove spooled upload",
                extra={"path": str(path)},
                exc_info=exc,
            )
