"""Video listing queries."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Video


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


async def list_published_videos(
    session: AsyncSession,
    *,
    offset: int,
    limit: int,
    owner_id: str | None = None,
) -> tuple[list[Video], bool]:
    """Return one page of published videos, newest first, and whether more exist."""
    stmt = select(Video).where(_eq(Video.is_published, True))
    if owner_id is not None:
        stmt = stmt.where(_eq(Video.owner_id, owner_id))
    stmt = (
        stmt.order_by(_desc(Video.created_at), _desc(Video.id))
        .offset(offset)
        .limit(limit + 1)
    )
    result = await session.execute(stmt)
    videos = list(result.scalars().all())
    has_more = len(videos) > limit
    return videos[:limit], has_more
