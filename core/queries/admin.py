"""Administrative queries: whole-database reset and row counts."""

from sqlalchemy import Table, delete, func, select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import content_items, courses, modules, profiles, sessions, user_progress

# Dependent tables first so foreign keys never block a delete
RESET_ORDER = [user_progress, sessions, content_items, modules, courses, profiles]


async def factory_reset(conn: AsyncConnection) -> None:
    """Delete every row from every table."""
    for table in RESET_ORDER:
        await conn.execute(delete(table))


async def count_rows(conn: AsyncConnection, table: Table) -> int:
    result = await conn.execute(select(func.count()).select_from(table))
    return result.scalar_one()
