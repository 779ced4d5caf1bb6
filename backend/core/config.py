"""Application settings loaded from the environment."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "VidTube API"
    app_env: Literal["development", "production", "test"] = "development"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    database_url: str = "sqlite+aiosqlite:///./vidtube.db"

    access_token_secret: str = "change-me-access-secret"
    access_token_expire_minutes: int = 15
    refresh_token_secret: str = "change-me-refresh-secret"
    refresh_token_expire_days: int = 10
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 12

    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket: str = "vidtube"
    minio_secure: bool = False
    # Base URL clients use to fetch stored media; derived from the endpoint when empty.
    media_public_base_url: str = ""

    upload_temp_dir: str = "./public/temp"
    upload_max_bytes: int = 5 * 1024 * 1024

    redis_url: str = "redis://localhost:6379/0"
    rate_limit_requests: int = 20
    rate_limit_window_seconds: int = 60
    rate_limit_trusted_proxies: list[str] = Field(default_factory=list)
    rate_limit_fail_open: bool = False

    @field_validator("app_env", mode="before")
    @classmethod
    def _normalize_env(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


settings = Settings()
