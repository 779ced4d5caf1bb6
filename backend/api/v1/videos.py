"""Video listing endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from api.deps import get_db
from models import User
from services.auth import NotFoundError
from services.auth.identity_resolution import normalize_username
from services.auth.schemas import ApiResponse, CamelModel
from services.videos import list_published_videos

from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, set_next_offset_header

router = APIRouter(prefix="/videos", tags=["videos"])


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


class VideoPublic(CamelModel):
    id: int
    video_file: str
    thumbnail: str
    title: str
    description: str
    views: int = 0
    duration: str
    is_published: bool = True
    owner_id: str | None = None
    created_at: datetime | None = None


@router.get("", response_model=ApiResponse[list[VideoPublic]])
async def list_videos(
    response: Response,
    offset: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    owner: str | None = Query(default=None, min_length=1, max_length=30),
    session: AsyncSession = Depends(get_db),
) -> ApiResponse[list[VideoPublic]]:
    owner_id: str | None = None
    if owner is not None:
        result = await session.execute(
            select(User.id).where(_eq(User.username, normalize_username(owner)))
        )
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            raise NotFoundError("Channel not found")

    videos, has_more = await list_published_videos(
        session,
        offset=offset,
        limit=limit,
        owner_id=owner_id,
    )
    set_next_offset_header(response, offset=offset, limit=limit, has_more=has_more)
    return ApiResponse[list[VideoPublic]](
        data=[VideoPublic.model_validate(video) for video in videos],
        message="Videos fetched successfully",
    )
