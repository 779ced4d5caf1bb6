"""Account and session endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile, status

from api.deps import get_account_service, get_current_user
from models import User
from models.user import EMAIL_MAX_LENGTH, FULLNAME_MAX_LENGTH, USERNAME_MAX_LENGTH
from services.auth import (
    REFRESH_COOKIE,
    AccountService,
    clear_token_cookies,
    public_view,
    set_token_cookies,
)
from services.auth.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserPublic,
)
from services.uploads import spooled_upload

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserPublic],
)
async def register(
    fullname: str = Form(default="", max_length=FULLNAME_MAX_LENGTH),
    email: str = Form(default="", max_length=EMAIL_MAX_LENGTH),
    username: str = Form(default="", max_length=USERNAME_MAX_LENGTH),
    password: str = Form(default=""),
    avatar: UploadFile | None = File(default=None),
    cover_image: UploadFile | None = File(default=None, alias="coverImage"),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[UserPublic]:
    async with spooled_upload(avatar) as avatar_path, spooled_upload(cover_image) as cover_path:
        user = await accounts.register(
            fullname=fullname,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )
    return ApiResponse[UserPublic](
        status_code=status.HTTP_201_CREATED,
        data=user,
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[LoginResult])
async def login(
    payload: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[LoginResult]:
    result = await accounts.login(
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    set_token_cookies(response, result.access_token, result.refresh_token)
    return ApiResponse[LoginResult](data=result, message="User logged in successfully")


@router.post("/logout", response_model=ApiResponse[dict[str, Any]])
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[dict[str, Any]]:
    await accounts.logout(current_user)
    clear_token_cookies(response)
    return ApiResponse[dict[str, Any]](data={}, message="User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    payload: RefreshRequest | None = Body(default=None),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[TokenPair]:
    incoming = request.cookies.get(REFRESH_COOKIE)
    if not incoming and payload is not None:
        incoming = payload.refresh_token

    tokens = await accounts.refresh_session(incoming)
    set_token_cookies(response, tokens.access_token, tokens.refresh_token)
    return ApiResponse[TokenPair](data=tokens, message="Access token refreshed successfully")


@router.get("/current-user", response_model=ApiResponse[UserPublic])
async def current_user_details(
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserPublic]:
    return ApiResponse[UserPublic](
        data=public_view(current_user),
        message="Current user details",
    )


@router.post("/change-password", response_model=ApiResponse[dict[str, Any]])
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[dict[str, Any]]:
    await accounts.change_password(
        current_user,
        old_password=payload.old_password,
        new_password=payload.new_password,
    )
    return ApiResponse[dict[str, Any]](data={}, message="Password changed successfully")


@router.patch("/update-account", response_model=ApiResponse[UserPublic])
async def update_account_details(
    payload: UpdateAccountRequest,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[UserPublic]:
    user = await accounts.update_account_details(
        current_user,
        fullname=payload.fullname,
        email=payload.email,
    )
    return ApiResponse[UserPublic](data=user, message="Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserPublic])
async def update_avatar(
    avatar: UploadFile | None = File(default=None),
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[UserPublic]:
    async with spooled_upload(avatar) as avatar_path:
        user = await accounts.update_avatar(current_user, avatar_path)
    return ApiResponse[UserPublic](data=user, message="Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserPublic])
async def update_cover_image(
    cover_image: UploadFile | None = File(default=None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> ApiResponse[UserPublic]:
    async with spooled_upload(cover_image) as cover_path:
        user = await accounts.update_cover_image(current_user, cover_path)
    return ApiResponse[UserPublic](data=user, message="Cover image updated successfully")
