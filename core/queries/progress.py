"""Queries for per-user content progress."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import content_items, modules, user_progress


async def upsert_user_progress(
    conn: AsyncConnection,
    *,
    user_id: UUID,
    content_item_id: UUID,
    completed: bool,
    progress_pct: float,
    last_position: int | None,
    last_accessed: datetime,
) -> dict[str, Any]:
    """Create or overwrite the progress row for (user, content item).

    Uses INSERT ... ON CONFLICT on the (user_id, content_item_id) unique
    constraint, so concurrent writers never create duplicates. The last
    write wins; nothing is merged.
    """
    stmt = pg_insert(user_progress).values(
        id=uuid4(),
        user_id=user_id,
        content_item_id=content_item_id,
        completed=completed,
        progress_pct=progress_pct,
        last_position=last_position,
        last_accessed=last_accessed,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "content_item_id"],
        set_={
            "completed": stmt.excluded.completed,
            "progress_pct": stmt.excluded.progress_pct,
            "last_position": stmt.excluded.last_position,
            "last_accessed": stmt.excluded.last_accessed,
            "updated_at": func.now(),
        },
    ).returning(user_progress)

    result = await conn.execute(stmt)
    # No explicit commit - let the caller's transaction context handle it
    return dict(result.mappings().one())


async def get_user_progress(
    conn: AsyncConnection, *, user_id: UUID, content_item_id: UUID
) -> dict[str, Any] | None:
    """Progress row for one content item, or None if never viewed."""
    result = await conn.execute(
        select(user_progress).where(
            and_(
                user_progress.c.user_id == user_id,
                user_progress.c.content_item_id == content_item_id,
            )
        )
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def get_progress_for_items(
    conn: AsyncConnection, *, user_id: UUID, content_item_ids: list[UUID]
) -> dict[UUID, dict[str, Any]]:
    """Progress rows for many content items.

    Returns dict mapping content_item_id to progress record. Items the user
    never opened are simply absent.
    """
    if not content_item_ids:
        return {}

    result = await conn.execute(
        select(user_progress).where(
            and_(
                user_progress.c.user_id == user_id,
                user_progress.c.content_item_id.in_(content_item_ids),
            )
        )
    )
    return {row["content_item_id"]: dict(row) for row in result.mappings()}


async def list_progress_by_course(
    conn: AsyncConnection, *, user_id: UUID, course_id: UUID
) -> list[dict[str, Any]]:
    """All of a user's progress rows within a course, in display order."""
    result = await conn.execute(
        select(user_progress)
        .join(content_items, user_progress.c.content_item_id == content_items.c.id)
        .join(modules, content_items.c.module_id == modules.c.id)
        .where(
            and_(modules.c.course_id == course_id, user_progress.c.user_id == user_id)
        )
        .order_by(modules.c.order, content_items.c.order)
    )
    return [dict(row) for row in result.mappings()]
