"""Port for user directory persistence operations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


class DuplicateUserError(ValueError):
    """Raised when a username or email is already owned by another user."""

    def __init__(self, *, fields: tuple[str, ...]) -> None:
        super().__init__(f"duplicate user fields: {', '.join(fields)}")
        self.fields = fields


@dataclass(frozen=True)
class UserCreateInput:
    """Input payload for inserting one user account."""

    username: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    username: str
    email: str
    password_hash: str
    bio: str | None
    image: str | None
    created_at: datetime
    updated_at: datetime


class UserRepositoryPort(Protocol):
    """User directory contract."""

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

    async def get_by_email(self, *, email: str) -> UserRecord | None:
        """Return user by exact email or None."""

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by exact username or None."""

    async def create_user(self, payload: UserCreateInput) -> UserRecord:
        """Insert one user, raising DuplicateUserError on a uniqueness conflict."""

    async def update_user(
        self,
        *,
        user_id: UUID,
        changes: Mapping[str, str | None],
    ) -> UserRecord | None:
        """Apply column changes to one user and return it, or None when missing."""
