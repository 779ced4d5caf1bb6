"""Pytest fixtures for the vidtube backend."""

import os

# Cheap hashes keep the suite fast; must be set before core.security is imported.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")

from collections.abc import AsyncIterator, Iterator  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from pathlib import Path  # noqa: E402
from uuid import uuid4  # noqa: E402

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from api.deps import get_db, get_media_host  # noqa: E402
from app import create_app  # noqa: E402
from core.config import settings  # noqa: E402
from models import User  # noqa: E402
from services import RateLimiter, set_rate_limiter  # noqa: E402
from services.auth import (  # noqa: E402
    AccountService,
    DuplicateUserError,
    MediaHostError,
    StoredMedia,
    StoreError,
    TokenService,
)


def _run_alembic_migrations(database_url: str) -> None:
    """Apply Alembic migrations to the given database URL."""
    backend_dir = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(backend_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(backend_dir / "alembic"))

    original_database_url = settings.database_url
    try:
        settings.database_url = database_url
        command.upgrade(alembic_cfg, "head")
    finally:
        settings.database_url = original_database_url


class InMemoryMediaHost:
    """Media host double keeping uploaded bytes in a dict."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.failing_folders: set[str] = set()
        self.fail_deletes = False
        self.blank_urls = False

    async def upload(self, path: Path, *, folder: str) -> StoredMedia:
        if folder in self.failing_folders:
            raise MediaHostError(f"upload to {folder} rejected")
        key = f"{folder}/{uuid4().hex}{path.suffix}"
        self.objects[key] = path.read_bytes()
        url = "" if self.blank_urls else f"https://media.test/{key}"
        return StoredMedia(url=url, key=key)

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        if self.fail_deletes:
            raise MediaHostError(f"delete of {key} rejected")
        # Deleting an absent key is a no-op, like the real bucket.
        self.objects.pop(key, None)


class InMemoryCredentialStore:
    """Credential store double with the same uniqueness rules as the table."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.fail_writes = False

    async def get_by_id(self, user_id: str) -> User | None:
        return self.users.get(user_id)

    async def find_by_username_or_email(self, *, username: str, email: str) -> User | None:
        for user in self.users.values():
            if user.username == username or user.email == email:
                return user
        return None

    async def create(self, user: User) -> User:
        return self._write(user)

    async def save(self, user: User) -> User:
        return self._write(user)

    async def set_refresh_token(self, user_id: str, token_hash: str | None) -> None:
        if self.fail_writes:
            raise StoreError("store unavailable")
        self.users[user_id].refresh_token_hash = token_hash

    async def swap_refresh_token(
        self,
        user_id: str,
        *,
        expected_hash: str,
        new_hash: str | None,
    ) -> bool:
        if self.fail_writes:
            raise StoreError("store unavailable")
        user = self.users.get(user_id)
        if user is None or user.refresh_token_hash != expected_hash:
            return False
        user.refresh_token_hash = new_hash
        return True

    def _write(self, user: User) -> User:
        if self.fail_writes:
            raise StoreError("store unavailable")
        for other in self.users.values():
            if other.id == user.id:
                continue
            if other.username == user.username:
                raise DuplicateUserError("duplicate", ("username",))
            if other.email == user.email:
                raise DuplicateUserError("duplicate", ("email",))
        now = datetime.now(timezone.utc)
        if user.created_at is None:
            user.created_at = now
        user.updated_at = now
        self.users[user.id] = user
        return user


@pytest.fixture(scope="session")
def test_database_url(tmp_path_factory) -> str:
    """Create and migrate a file-backed SQLite database for tests."""
    db_dir = tmp_path_factory.mktemp("sqlite")
    db_path = db_dir / "backend-test.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    _run_alembic_migrations(database_url)
    return database_url


@pytest.fixture(autouse=True)
def _upload_temp_dir(tmp_path, monkeypatch) -> Path:
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_temp_dir", str(directory))
    return directory


@pytest_asyncio.fixture()
async def test_engine(test_database_url: str) -> AsyncIterator:
    """Create an async engine bound to the migrated SQLite test database."""
    engine = create_async_engine(
        test_database_url,
        connect_args={"check_same_thread": False},
    )
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def clean_database(session_maker) -> AsyncIterator[None]:
    """Clear tables before each test to guarantee isolation."""
    async with session_maker() as session:
        for table in reversed(SQLModel.metadata.sorted_tables):
            await session.execute(table.delete())
        await session.commit()
    yield


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session


@pytest.fixture()
def media_host() -> InMemoryMediaHost:
    return InMemoryMediaHost()


@pytest.fixture()
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def token_service() -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture()
def account_service(
    credential_store: InMemoryCredentialStore,
    media_host: InMemoryMediaHost,
    token_service: TokenService,
) -> AccountService:
    return AccountService(credential_store, media_host, token_service)


@pytest.fixture()
def app(session_maker, media_host: InMemoryMediaHost) -> Iterator[FastAPI]:
    """Create the FastAPI app with test database and media host overrides."""
    application = create_app()

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_media_host] = lambda: media_host
    yield application


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class _InMemoryRedis:
    def __init__(self) -> None:
        self.data: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        value = self.data.get(key, 0) + 1
        self.data[key] = value
        return value

    async def expire(self, key: str, ttl: int) -> None:  # pragma: no cover - noop
        return None


@pytest.fixture(autouse=True)
def _rate_limiter_stub() -> Iterator[None]:
    limiter = RateLimiter(_InMemoryRedis(), limit=1_000, window_seconds=60)
    set_rate_limiter(limiter)
    yield
    set_rate_limiter(None)
