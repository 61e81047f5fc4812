"""
Active-profile session.

The library runs as a single-operator (kiosk style) app: at most one profile
is "logged in" at a time. The session row is persisted so it survives a
restart and is cached in memory for cheap lookups on every request.

A SessionStore is created at start-up, kept on app.state and handed to
route handlers through a FastAPI dependency.
"""

import logging
import threading
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from core.database import get_connection, get_transaction
from core.exceptions import ProfileNotFoundError
from core.queries import sessions as session_queries
from core.queries.profiles import get_profile_by_id

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the single active session and mirrors it to the database."""

    def __init__(self):
        self._lock = threading.Lock()
        self._session: dict | None = None

    @property
    def current_user_id(self) -> UUID | None:
        with self._lock:
            return self._session["user_id"] if self._session else None

    @property
    def is_logged_in(self) -> bool:
        return self.current_user_id is not None

    def _set(self, session: dict | None) -> None:
        with self._lock:
            self._session = session

    async def load_active(self) -> None:
        """Restore the most recent persisted session, if there is one."""
        try:
            async with get_connection() as conn:
                session = await session_queries.get_active_session(conn)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load active session: {e}")
            return

        self._set(session)
        if session:
            logger.info(f"Restored session for profile {session['user_id']}")

    async def select_profile(self, profile_id: UUID) -> dict:
        """
        Make profile_id the active profile, replacing any other session.

        Returns:
            The profile record

        Raises:
            ProfileNotFoundError: If the profile doesn't exist
        """
        async with get_transaction() as conn:
            profile = await get_profile_by_id(conn, profile_id)
            if profile is None:
                raise ProfileNotFoundError(f"Profile not found: {profile_id}")

            await session_queries.delete_all_sessions(conn)
            session = await session_queries.create_session(conn, profile_id)

        self._set(session)
        logger.info(f"Profile {profile_id} selected")
        return profile

    async def logout(self) -> None:
        """End the active session. A no-op when nobody is logged in."""
        with self._lock:
            session = self._session

        if session is not None:
            async with get_transaction() as conn:
                await session_queries.delete_session(conn, session["id"])

        self._set(None)

    def forget_profile(self, profile_ids: list[UUID]) -> None:
        """Drop the cached session if it belongs to a deleted profile.

        The database row is removed by the profile delete cascade.
        """
        with self._lock:
            if self._session and self._session["user_id"] in profile_ids:
                self._session = None

    async def clear_all(self) -> None:
        """Delete every session row and forget the cached one."""
        async with get_transaction() as conn:
            await session_queries.delete_all_sessions(conn)
        self._set(None)
