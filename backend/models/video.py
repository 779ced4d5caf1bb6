"""Video metadata model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlmodel import Field, SQLModel


class Video(SQLModel, table=True):
    """Uploaded video with hosted file and thumbnail URLs."""

    __tablename__ = "videos"
    __table_args__ = (
        Index("ix_videos_published_created", "is_published", "created_at"),
    )

    id: int | None = Field(default=None, sa_column=Column(Integer, primary_key=True, autoincrement=True))
    video_file: str = Field(sa_column=Column(String(1024), nullable=False))
    thumbnail: str = Field(sa_column=Column(String(1024), nullable=False))
    title: str = Field(sa_column=Column(String(200), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    views: int = Field(
        default=0, sa_column=Column(Integer, nullable=False, server_default=text("0"))
    )
    duration: str = Field(sa_column=Column(String(32), nullable=False))
    is_published: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default=text("true")),
    )
    owner_id: str | None = Field(
        default=None,
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )
