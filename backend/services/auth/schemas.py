"""Public views and request bodies for account endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.user import EMAIL_MAX_LENGTH, FULLNAME_MAX_LENGTH

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserPublic(CamelModel):
    """User projection without password or refresh token."""

    id: str
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class LoginResult(TokenPair):
    user: UserPublic


class LoginRequest(CamelModel):
    username: str = ""
    email: str = ""
    password: str = ""


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = ""
    new_password: str = ""


class UpdateAccountRequest(CamelModel):
    fullname: str = Field(default="", max_length=FULLNAME_MAX_LENGTH)
    email: str = Field(default="", max_length=EMAIL_MAX_LENGTH)


class ApiResponse(CamelModel, Generic[DataT]):
    status_code: int = 200
    data: DataT
    message: str = "Success"
    success: bool = True


class ApiError(CamelModel):
    status_code: int
    message: str
    success: bool = False
    errors: list[Any] = Field(default_factory=list)
