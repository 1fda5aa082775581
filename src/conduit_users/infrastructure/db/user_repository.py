"""SQLAlchemy adapter for the user directory."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import cast
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conduit_users.application.ports.user_repository_port import (
    DuplicateUserError,
    UserCreateInput,
    UserRecord,
    UserRepositoryPort,
)
from conduit_users.infrastructure.db.metadata import users

_UNIQUE_FIELDS = ("email", "username")
_UPDATABLE_COLUMNS = frozenset({"username", "email", "password_hash", "bio", "image"})


def _duplicate_fields(error: IntegrityError) -> tuple[str, ...]:
    """Return unique columns named by a constraint violation (SQLite or Postgres wording)."""

    message = str(error.orig).lower()
    return tuple(
        field
        for field in _UNIQUE_FIELDS
        if f"users.{field}" in message or f"uq_users_{field}" in message
    )


class SqlAlchemyUserRepository(UserRepositoryPort):
    """User repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

        return await self._fetch_one(users.c.id == user_id)

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by exact email or None."""

        return await self._fetch_one(users.c.email == email)

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact username or None."""

        return await self._fetch_one(users.c.username == username)

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user row; unique constraints decide concurrent duplicates."""

        statement = sa.insert(users).values(
            id=uuid4(),
            username=payload.username,
            email=payload.email,
            password_hash=payload.password_hash,
        ).returning(*users.c)

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().one()
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                fields = _duplicate_fields(error)
                if fields:
                    raise DuplicateUserError(fields=fields) from error
                raise

        return _to_user_record(row)

    async def update_user(
        self,
        *,
        user_id: UUID,
        changes: Mapping[str, str | None],
    ) -> UserRecord | None:
        """Apply column changes and return the updated row, or None when user is missing."""

        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"unsupported user columns: {', '.join(sorted(unknown))}")
        if not changes:
            return await self.get_by_id(user_id=user_id)

        statement = (
            sa.update(users)
            .where(users.c.id == user_id)
            .values(**dict(changes), updated_at=sa.func.current_timestamp())
            .returning(*users.c)
        )

        async with self._session_factory() as session:
            try:
                result = await session.execute(statement)
                row = result.mappings().first()
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                fields = _duplicate_fields(error)
                if fields:
                    raise DuplicateUserError(fields=fields) from error
                raise

        if row is None:
            return None
        return _to_user_record(row)

    async def _fetch_one(self, condition: sa.ColumnElement[bool]) -> UserRecord | None:
        statement = sa.select(*users.c).where(condition).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        username=cast(str, row["username"]),
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        bio=cast(str | None, row["bio"]),
        image=cast(str | None, row["image"]),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
