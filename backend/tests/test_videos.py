"""Tests for video listing."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import User, Video
from services.videos import list_published_videos

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


async def _make_owner(session: AsyncSession, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        fullname=username.title(),
        password_hash="not-a-real-hash",
        avatar=f"https://cdn.example.com/{username}.png",
    )
    session.add(user)
    await session.commit()
    return user


async def _make_videos(session: AsyncSession, owner: User, count: int, *, published: bool = True) -> None:
    for index in range(count):
        created = BASE_TIME + timedelta(minutes=index)
        session.add(
            Video(
                video_file=f"https://cdn.example.com/{owner.username}/{index}.mp4",
                thumbnail=f"https://cdn.example.com/{owner.username}/{index}.jpg",
                title=f"{owner.username} video {index}",
                description="clip",
                duration="00:30",
                is_published=published,
                owner_id=owner.id,
                created_at=created,
                updated_at=created,
            )
        )
    await session.commit()


@pytest.mark.asyncio
async def test_list_published_videos_pages_newest_first(db_session: AsyncSession):
    owner = await _make_owner(db_session, "channel")
    await _make_videos(db_session, owner, 3)

    first_page, has_more = await list_published_videos(db_session, offset=0, limit=2)
    second_page, has_more_after = await list_published_videos(db_session, offset=2, limit=2)

    assert [video.title for video in first_page] == ["channel video 2", "channel video 1"]
    assert has_more is True
    assert [video.title for video in second_page] == ["channel video 0"]
    assert has_more_after is False


@pytest.mark.asyncio
async def test_list_published_videos_excludes_unpublished(db_session: AsyncSession):
    owner = await _make_owner(db_session, "channel")
    await _make_videos(db_session, owner, 1)
    await _make_videos(db_session, owner, 2, published=False)

    videos, _ = await list_published_videos(db_session, offset=0, limit=10)

    assert len(videos) == 1
    assert all(video.is_published for video in videos)


@pytest.mark.asyncio
async def test_videos_endpoint_sets_next_offset(async_client, db_session: AsyncSession):
    owner = await _make_owner(db_session, "channel")
    await _make_videos(db_session, owner, 3)

    response = await async_client.get("/api/v1/videos", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert len(body["data"]) == 2
    assert {"videoFile", "thumbnail", "title", "views", "isPublished", "ownerId"} <= set(body["data"][0])
    assert response.headers["X-Next-Offset"] == "2"

    last = await async_client.get("/api/v1/videos", params={"limit": 2, "offset": 2})
    assert len(last.json()["data"]) == 1
    assert "X-Next-Offset" not in last.headers


@pytest.mark.asyncio
async def test_videos_endpoint_filters_by_owner(async_client, db_session: AsyncSession):
    alice = await _make_owner(db_session, "alice")
    bob = await _make_owner(db_session, "bob")
    await _make_videos(db_session, alice, 2)
    await _make_videos(db_session, bob, 1)

    response = await async_client.get("/api/v1/videos", params={"owner": "BOB"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [video["ownerId"] for video in data] == [bob.id]


@pytest.mark.asyncio
async def test_videos_endpoint_unknown_owner(async_client):
    response = await async_client.get("/api/v1/videos", params={"owner": "ghost"})

    assert response.status_code == 404
    assert response.json()["message"] == "Channel not found"
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_videos_endpoint_rejects_oversized_page(async_client):
    response = await async_client.get("/api/v1/videos", params={"limit": 1000})

    assert response.status_code == 400
    assert response.json()["success"] is False
