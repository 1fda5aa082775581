"""SQLAlchemy adapter for the account audit trail."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conduit_users.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRecord,
    AuthEventRepositoryPort,
    AuthEventType,
)
from conduit_users.infrastructure.db.metadata import auth_events


class SqlAlchemyAuthEventRepository(AuthEventRepositoryPort):
    """Writes login, registration and profile events; reads them back per user."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        event_row = {
            "user_id": payload.user_id,
            "event_type": AuthEventType(payload.event_type).value,
            "ip_address": payload.ip_address,
            "user_agent": payload.user_agent,
            "payload": dict(payload.payload),
        }
        async with self._session_factory() as session:
            event_id = await session.scalar(
                sa.insert(auth_events).values(**event_row).returning(auth_events.c.id)
            )
            await session.commit()

        if event_id is None:
            raise RuntimeError("auth event insert returned no id")
        return int(event_id)

    async def list_for_user(self, *, user_id: UUID, limit: int = 50) -> list[AuthEventRecord]:
        statement = (
            sa.select(auth_events)
            .where(auth_events.c.user_id == user_id)
            .order_by(auth_events.c.occurred_at.desc(), auth_events.c.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(statement)).mappings().all()

        return [_to_event_record(row) for row in rows]


def _to_event_record(row: Any) -> AuthEventRecord:
    return AuthEventRecord(
        event_id=int(row["id"]),
        user_id=row["user_id"],
        event_type=AuthEventType(row["event_type"]),
        payload=dict(row["payload"] or {}),
        occurred_at=row["occurred_at"],
    )
