"""Version 1 API routers."""

from fastapi import APIRouter

from . import health, users, videos

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(videos.router)

__all__ = ["api_router"]
