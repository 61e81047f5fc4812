"""Tests for the active-profile SessionStore (database mocked)."""

import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import ProfileNotFoundError
from core.sessions import SessionStore


@asynccontextmanager
async def mock_db_connection():
    """Create a mock async context manager for database connections."""
    yield MagicMock()


@pytest.fixture
def mock_db():
    with (
        patch("core.sessions.get_connection", mock_db_connection),
        patch("core.sessions.get_transaction", mock_db_connection),
    ):
        yield


def _session(user_id):
    return {"id": uuid.uuid4(), "user_id": user_id}


class TestSessionStore:
    def test_starts_logged_out(self):
        store = SessionStore()

        assert store.current_user_id is None
        assert store.is_logged_in is False

    @pytest.mark.asyncio
    async def test_select_profile_replaces_sessions(self, mock_db):
        profile_id = uuid.uuid4()
        store = SessionStore()

        with (
            patch(
                "core.sessions.get_profile_by_id",
                new=AsyncMock(return_value={"id": profile_id, "name": "Ada"}),
            ),
            patch("core.queries.sessions.delete_all_sessions", new=AsyncMock()) as delete_all,
            patch(
                "core.queries.sessions.create_session",
                new=AsyncMock(return_value=_session(profile_id)),
            ),
        ):
            profile = await store.select_profile(profile_id)

        assert profile["name"] == "Ada"
        assert store.current_user_id == profile_id
        assert store.is_logged_in is True
        delete_all.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_select_unknown_profile(self, mock_db):
        store = SessionStore()

        with patch("core.sessions.get_profile_by_id", new=AsyncMock(return_value=None)):
            with pytest.raises(ProfileNotFoundError):
                await store.select_profile(uuid.uuid4())

        assert store.current_user_id is None

    @pytest.mark.asyncio
    async def test_logout(self, mock_db):
        store = SessionStore()
        session = _session(uuid.uuid4())
        store._set(session)

        with patch("core.queries.sessions.delete_session", new=AsyncMock()) as delete:
            await store.logout()

        delete.assert_awaited_once()
        assert delete.await_args.args[1] == session["id"]
        assert store.current_user_id is None

    @pytest.mark.asyncio
    async def test_logout_when_logged_out(self, mock_db):
        store = SessionStore()

        with patch("core.queries.sessions.delete_session", new=AsyncMock()) as delete:
            await store.logout()

        delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_active(self, mock_db):
        user_id = uuid.uuid4()
        store = SessionStore()

        with patch(
            "core.queries.sessions.get_active_session",
            new=AsyncMock(return_value=_session(user_id)),
        ):
            await store.load_active()

        assert store.current_user_id == user_id

    @pytest.mark.asyncio
    async def test_load_active_tolerates_database_errors(self, mock_db):
        store = SessionStore()

        with patch(
            "core.queries.sessions.get_active_session",
            new=AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down"))),
        ):
            await store.load_active()

        assert store.current_user_id is None

    def test_forget_profile(self):
        user_id = uuid.uuid4()
        store = SessionStore()
        store._set(_session(user_id))

        store.forget_profile([uuid.uuid4()])
        assert store.current_user_id == user_id

        store.forget_profile([user_id])
        assert store.current_user_id is None

    @pytest.mark.asyncio
    async def test_clear_all(self, mock_db):
        store = SessionStore()
        store._set(_session(uuid.uuid4()))

        with patch("core.queries.sessions.delete_all_sessions", new=AsyncMock()) as delete_all:
            await store.clear_all()

        delete_all.assert_awaited_once()
        assert store.current_user_id is None
