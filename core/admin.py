"""Administrative operations: factory reset and database stats."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from core.database import get_connection, get_transaction
from core.queries import admin as admin_queries
from core.sessions import SessionStore
from core.tables import courses, profiles
from core.tasks import TaskRegistry

logger = logging.getLogger(__name__)


async def factory_reset(session_store: SessionStore, task_registry: TaskRegistry) -> None:
    """
    Wipe every profile, course and progress record.

    Course files on disk are untouched. A failure while clearing the
    session cache is logged but does not undo the reset.
    """
    logger.warning("Factory reset requested")
    async with get_transaction() as conn:
        await admin_queries.factory_reset(conn)

    try:
        await session_store.clear_all()
    except SQLAlchemyError as e:
        logger.error(f"Error clearing sessions after factory reset: {e}")

    task_registry.clear()
    logger.info("Factory reset completed")


async def get_database_stats() -> dict[str, int]:
    """Row counts for profiles and courses; -1 for a count that could not be read."""
    stats = {}
    async with get_connection() as conn:
        for name, table in (("profiles", profiles), ("courses", courses)):
            try:
                stats[name] = await admin_queries.count_rows(conn, table)
            except SQLAlchemyError as e:
                logger.error(f"Error counting {name}: {e}")
                stats[name] = -1
    return stats
