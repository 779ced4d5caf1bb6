"""SQLModel models package."""

from .user import User
from .video import Video

__all__ = ["User", "Video"]
