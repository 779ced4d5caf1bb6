"""Database helpers."""

from .errors import is_unique_violation, violated_columns
from .session import AsyncSessionMaker, async_engine, get_session

__all__ = [
    "AsyncSessionMaker",
    "async_engine",
    "get_session",
    "is_unique_violation",
    "violated_columns",
]
