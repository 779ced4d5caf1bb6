"""User persistence behind the account service."""

from __future__ import annotations

import logging
from typing import Any, Protocol, cast

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation, violated_columns
from models import User

from .errors import DuplicateUserError, StoreError

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


class CredentialStore(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def find_by_username_or_email(self, *, username: str, email: str) -> User | None: ...

    async def create(self, user: User) -> User: ...

    async def save(self, user: User) -> User: ...

    async def set_refresh_token(self, user_id: str, token_hash: str | None) -> None: ...

    async def swap_refresh_token(
        self,
        user_id: str,
        *,
        expected_hash: str,
        new_hash: str | None,
    ) -> bool: ...


class SqlCredentialStore:
    """Credential store backed by the ``users`` table.

    Uniqueness of username and email is enforced by the table constraints;
    refresh-token rotation is a conditional ``UPDATE`` so two concurrent
    refreshes with the same token cannot both succeed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def find_by_username_or_email(self, *, username: str, email: str) -> User | None:
        result = await self.session.execute(
            select(User)
            .where(or_(_eq(User.username, username), _eq(User.email, email)))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.session.add(user)
        await self._commit()
        await self.session.refresh(user)
        return user

    async def save(self, user: User) -> User:
        self.session.add(user)
        await self._commit()
        await self.session.refresh(user)
        return user

    async def set_refresh_token(self, user_id: str, token_hash: str | None) -> None:
        await self._execute_update(
            update(User)
            .where(_eq(User.id, user_id))
            .values(refresh_token_hash=token_hash)
        )

    async def swap_refresh_token(
        self,
        user_id: str,
        *,
        expected_hash: str,
        new_hash: str | None,
    ) -> bool:
        rowcount = await self._execute_update(
            update(User)
            .where(
                _eq(User.id, user_id),
                _eq(User.refresh_token_hash, expected_hash),
            )
            .values(refresh_token_hash=new_hash)
        )
        return rowcount == 1

    async def _execute_update(self, statement: Any) -> int:
        try:
            result = await self.session.execute(
                statement.execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StoreError("Failed to update user") from exc
        return cast(Any, result).rowcount

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if is_unique_violation(exc):
                raise DuplicateUserError(
                    "Username or email already taken",
                    violated_columns(exc),
                ) from exc
            raise StoreError("Failed to persist user") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("User commit failed", exc_info=exc)
            raise StoreError("Failed to persist user") from exc
