"""Account registration, login and session rotation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from models import User
from models.user import EMAIL_MAX_LENGTH, FULLNAME_MAX_LENGTH, USERNAME_MAX_LENGTH

from .credential_store import CredentialStore
from .errors import (
    ConflictError,
    DuplicateUserError,
    InternalError,
    MediaHostError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    UploadError,
    ValidationError,
)
from .identity_resolution import is_blank, is_valid_email, normalize_email, normalize_username
from .media_host import MediaHost, StoredMedia
from .schemas import LoginResult, TokenPair, UserPublic
from .token_store import hash_refresh_token, refresh_token_matches
from .tokens import TokenService

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"
COVER_IMAGE_FOLDER = "covers"


@dataclass(frozen=True)
class _ImageField:
    folder: str
    url_attr: str
    key_attr: str
    label: str


AVATAR_FIELD = _ImageField(AVATAR_FOLDER, "avatar", "avatar_key", "avatar")
COVER_IMAGE_FIELD = _ImageField(COVER_IMAGE_FOLDER, "cover_image", "cover_image_key", "cover image")


def public_view(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


def _check_profile(*, fullname: str, email: str, username: str | None = None) -> None:
    if username is not None and len(username.strip()) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")
    if len(fullname.strip()) > FULLNAME_MAX_LENGTH:
        raise ValidationError(f"Fullname must be at most {FULLNAME_MAX_LENGTH} characters")
    if len(email.strip()) > EMAIL_MAX_LENGTH or not is_valid_email(email):
        raise ValidationError("Email is invalid")


class AccountService:
    """Orchestrates the credential store, media host and token service."""

    def __init__(
        self,
        store: CredentialStore,
        media_host: MediaHost,
        tokens: TokenService,
    ) -> None:
        self.store = store
        self.media_host = media_host
        self.tokens = tokens

    async def register(
        self,
        *,
        fullname: str,
        email: str,
        username: str,
        password: str,
        avatar_path: Path | None,
        cover_image_path: Path | None = None,
    ) -> UserPublic:
        if any(is_blank(field) for field in (fullname, email, username, password)):
            raise ValidationError("All fields are required")
        _check_profile(fullname=fullname, email=email, username=username)
        if avatar_path is None:
            raise ValidationError("Avatar file is required")

        normalized_username = normalize_username(username)
        normalized_email = normalize_email(email)
        existing = await self.store.find_by_username_or_email(
            username=normalized_username,
            email=normalized_email,
        )
        if existing is not None:
            raise ConflictError()

        avatar = await self._upload(avatar_path, AVATAR_FIELD)
        cover_image: StoredMedia | None = None
        if cover_image_path is not None:
            try:
                cover_image = await self._upload(cover_image_path, COVER_IMAGE_FIELD)
            except UploadError:
                await self._discard_media(avatar)
                raise

        user = User(
            fullname=fullname.strip(),
            email=normalized_email,
            username=normalized_username,
            avatar=avatar.url,
            avatar_key=avatar.key,
            cover_image=cover_image.url if cover_image else "",
            cover_image_key=cover_image.key if cover_image else None,
        )
        user.set_password(password)

        try:
            created = await self.store.create(user)
        except DuplicateUserError as exc:
            await self._discard_media(avatar, cover_image)
            raise ConflictError(errors=exc.fields) from exc
        except StoreError as exc:
            logger.error(
                "User creation failed, removing uploaded images",
                extra={"username": normalized_username},
                exc_info=exc,
            )
            await self._discard_media(avatar, cover_image)
            raise InternalError(
                "Something went wrong while creating a user and images were deleted"
            ) from exc

        logger.info("User registered", extra={"user_id": created.id})
        return public_view(created)

    async def login(self, *, username: str, email: str, password: str) -> LoginResult:
        # All three are required together; see DESIGN.md.
        if is_blank(username) or is_blank(email) or is_blank(password):
            raise ValidationError("Username, email and password are required")

        user = await self.store.find_by_username_or_email(
            username=normalize_username(username),
            email=normalize_email(email),
        )
        if user is None:
            raise NotFoundError()

        if not user.check_password(password):
            logger.info("Login rejected", extra={"user_id": user.id})
            raise UnauthorizedError("Invalid credentials")

        if user.password_needs_rehash():
            user.set_password(password)
            await self._save(user, failure="Something went wrong while logging in")

        tokens = await self._start_session(user)
        return LoginResult(
            user=public_view(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    async def refresh_session(self, incoming_refresh_token: str | None) -> TokenPair:
        if incoming_refresh_token is None or is_blank(incoming_refresh_token):
            raise UnauthorizedError("Refresh token is required")

        user_id = self.tokens.verify_refresh_token(incoming_refresh_token)
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Invalid refresh token")

        if not refresh_token_matches(incoming_refresh_token, user.refresh_token_hash):
            logger.info("Stale refresh token presented", extra={"user_id": user.id})
            raise UnauthorizedError("Refresh token is expired or used")

        pair = self._issue_pair(user)
        try:
            swapped = await self.store.swap_refresh_token(
                user.id,
                expected_hash=hash_refresh_token(incoming_refresh_token),
                new_hash=hash_refresh_token(pair.refresh_token),
            )
        except StoreError as exc:
            raise InternalError("Something went wrong while refreshing access token") from exc
        if not swapped:
            # Another request rotated the token between the read and the update.
            raise UnauthorizedError("Refresh token is expired or used")
        return pair

    async def logout(self, user: User) -> None:
        try:
            await self.store.set_refresh_token(user.id, None)
        except StoreError as exc:
            raise InternalError("Something went wrong while logging out") from exc
        user.refresh_token_hash = None
        logger.info("User logged out", extra={"user_id": user.id})

    async def change_password(self, user: User, *, old_password: str, new_password: str) -> None:
        if is_blank(old_password) or is_blank(new_password):
            raise ValidationError("Old and new password are required")
        if not user.check_password(old_password):
            raise UnauthorizedError("Invalid old password")

        user.set_password(new_password)
        await self._save(user, failure="Something went wrong while changing password")

    async def update_account_details(self, user: User, *, fullname: str, email: str) -> UserPublic:
        if is_blank(fullname) or is_blank(email):
            raise ValidationError("Fullname and email are required")
        _check_profile(fullname=fullname, email=email)

        user.fullname = fullname.strip()
        user.email = normalize_email(email)
        saved = await self._save(user, failure="Something went wrong while updating account details")
        return public_view(saved)

    async def update_avatar(self, user: User, avatar_path: Path | None) -> UserPublic:
        return await self._replace_image(user, avatar_path, AVATAR_FIELD)

    async def update_cover_image(self, user: User, cover_image_path: Path | None) -> UserPublic:
        return await self._replace_image(user, cover_image_path, COVER_IMAGE_FIELD)

    async def _replace_image(self, user: User, path: Path | None, field: _ImageField) -> UserPublic:
        if path is None:
            raise ValidationError(f"{field.label.capitalize()} file is missing")

        media = await self._upload(path, field)
        previous_key: str | None = getattr(user, field.key_attr)
        setattr(user, field.url_attr, media.url)
        setattr(user, field.key_attr, media.key)
        try:
            saved = await self._save(user, failure=f"Failed to update {field.label}")
        except InternalError:
            await self._discard_media(media)
            raise

        if previous_key and previous_key != media.key:
            await self._discard_media(StoredMedia(url="", key=previous_key))
        return public_view(saved)

    def _issue_pair(self, user: User) -> TokenPair:
        access_token = self.tokens.issue_access_token(
            user.id,
            username=user.username,
            email=user.email,
            fullname=user.fullname,
        )
        refresh_token = self.tokens.issue_refresh_token(user.id)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def _start_session(self, user: User) -> TokenPair:
        pair = self._issue_pair(user)
        refresh_hash = hash_refresh_token(pair.refresh_token)
        try:
            await self.store.set_refresh_token(user.id, refresh_hash)
        except StoreError as exc:
            raise InternalError("Something went wrong while generating tokens") from exc
        user.refresh_token_hash = refresh_hash
        logger.info("Session started", extra={"user_id": user.id})
        return pair

    async def _save(self, user: User, *, failure: str) -> User:
        try:
            return await self.store.save(user)
        except DuplicateUserError as exc:
            raise ConflictError("Email is already in use", exc.fields) from exc
        except StoreError as exc:
            raise InternalError(failure) from exc

    async def _upload(self, path: Path, field: _ImageField) -> StoredMedia:
        failure = f"Failed to upload {field.label}"
        try:
            media = await self.media_host.upload(path, folder=field.folder)
        except MediaHostError as exc:
            logger.warning(failure, exc_info=exc)
            raise UploadError(failure) from exc
        if not media.url:
            await self._discard_media(media)
            raise UploadError(failure)
        return media

    async def _discard_media(self, *media: StoredMedia | None) -> None:
        for item in media:
            if item is None or not item.key:
                continue
            try:
                await self.media_host.delete(item.key)
            except MediaHostError as exc:
                logger.warning(
                    "Failed to delete uploaded media",
                    extra={"media_key": item.key},
                    exc_info=exc,
                )
