"""Port for append-only account audit events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol
from uuid import UUID


class AuthEventType(StrEnum):
    """Account lifecycle events written to the audit trail."""

    USER_REGISTERED = "user_registered"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    PROFILE_UPDATED = "profile_updated"


@dataclass(frozen=True)
class AuthEventCreateInput:
    """Input payload for appending one auth event."""

    user_id: UUID | None
    event_type: AuthEventType
    ip_address: str | None
    user_agent: str | None
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthEventRecord:
    """Persisted audit event as read back for one account."""

    event_id: int
    user_id: UUID | None
    event_type: AuthEventType
    payload: dict[str, Any]
    occurred_at: datetime


class AuthEventRepositoryPort(Protocol):
    """Auth event persistence contract."""

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        """Append one auth event and return its id."""

    async def list_for_user(self, *, user_id: UUID, limit: int = 50) -> list[AuthEventRecord]:
        """Return the newest events recorded for one account, newest first."""
