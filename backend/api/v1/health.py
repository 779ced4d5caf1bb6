"""Liveness endpoint."""

from fastapi import APIRouter

from services.auth.schemas import ApiResponse

router = APIRouter(tags=["health"])


@router.get("/healthcheck", response_model=ApiResponse[dict[str, str]])
async def healthcheck() -> ApiResponse[dict[str, str]]:
    return ApiResponse[dict[str, str]](data={"status": "ok"}, message="Health check passed")
