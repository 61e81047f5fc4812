"""Queries for the persisted active-profile session."""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import sessions


async def create_session(conn: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    """Insert a session row for a profile."""
    result = await conn.execute(
        insert(sessions).values(id=uuid4(), user_id=user_id).returning(sessions)
    )
    return dict(result.mappings().one())


async def get_active_session(conn: AsyncConnection) -> dict[str, Any] | None:
    """Most recently created session, if any."""
    result = await conn.execute(
        select(sessions).order_by(sessions.c.created_at.desc()).limit(1)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def delete_session(conn: AsyncConnection, session_id: UUID) -> None:
    await conn.execute(delete(sessions).where(sessions.c.id == session_id))


async def delete_all_sessions(conn: AsyncConnection) -> None:
    await conn.execute(delete(sessions))
