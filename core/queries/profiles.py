"""Profile queries using SQLAlchemy Core."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import profiles


async def list_profiles(conn: AsyncConnection) -> list[dict[str, Any]]:
    """All profiles, oldest first."""
    result = await conn.execute(select(profiles).order_by(profiles.c.created_at))
    return [dict(row) for row in result.mappings()]


async def create_profile(
    conn: AsyncConnection, name: str, profile_id: UUID | None = None
) -> dict[str, Any]:
    """Create a profile and return the created record."""
    result = await conn.execute(
        insert(profiles)
        .values(id=profile_id or uuid4(), name=name)
        .returning(profiles)
    )
    return dict(result.mappings().one())


async def get_profile_by_id(
    conn: AsyncConnection, profile_id: UUID
) -> dict[str, Any] | None:
    """Get a profile by ID."""
    result = await conn.execute(select(profiles).where(profiles.c.id == profile_id))
    row = result.mappings().first()
    return dict(row) if row else None


async def rename_profile(
    conn: AsyncConnection, current_name: str, new_name: str
) -> dict[str, Any] | None:
    """Rename a profile and return the updated record (None if not found)."""
    result = await conn.execute(
        update(profiles)
        .where(profiles.c.name == current_name)
        .values(name=new_name, updated_at=datetime.now(timezone.utc))
        .returning(profiles)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def delete_profile_by_name(conn: AsyncConnection, name: str) -> list[UUID]:
    """Delete profiles with this name and return the deleted IDs."""
    result = await conn.execute(
        delete(profiles).where(profiles.c.name == name).returning(profiles.c.id)
    )
    return [row.id for row in result]
