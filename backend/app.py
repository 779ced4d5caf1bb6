"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import install_error_handlers
from api.v1 import api_router
from core import configure_logging, settings
from services import RateLimitMiddleware, get_rate_limiter

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware, limiter_factory=get_rate_limiter)
    install_error_handlers(app)
    app.include_router(api_router)

    logger.info("Application configured", extra={"env": settings.app_env})
    return app
