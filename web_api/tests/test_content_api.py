"""Tests for module, content item and user progress endpoints."""

import os
import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.courses.progress import summarize_module
from core.courses.types import ProgressSummary
from core.exceptions import CourseModuleNotFoundError


@asynccontextmanager
async def mock_db_connection():
    """Create a mock async context manager for database connections."""
    yield MagicMock()


@pytest.fixture
def mock_db():
    with (
        patch("web_api.routes.modules.get_connection", mock_db_connection),
        patch("web_api.routes.modules.get_transaction", mock_db_connection),
        patch("web_api.routes.content.get_connection", mock_db_connection),
        patch("web_api.routes.content.get_transaction", mock_db_connection),
        patch("web_api.routes.users.get_connection", mock_db_connection),
    ):
        yield


def _echo_upsert():
    """Stand-in for the upsert query that returns what it was asked to store."""
    return patch(
        "core.courses.progress.upsert_user_progress",
        new=AsyncMock(side_effect=lambda conn, **kw: kw),
    )


@pytest.fixture
def known_rows():
    with (
        patch(
            "core.courses.progress.get_profile_by_id",
            new=AsyncMock(return_value={"id": "p"}),
        ),
        patch(
            "core.courses.progress.get_content_item",
            new=AsyncMock(return_value={"id": "i"}),
        ),
    ):
        yield


class TestModules:
    def test_update_order(self, client, mock_db):
        module_id = uuid.uuid4()
        with patch(
            "core.queries.courses.update_module",
            new=AsyncMock(return_value={"id": str(module_id), "order": 3}),
        ) as update:
            response = client.patch(f"/api/modules/{module_id}", json={"order": 3})

        assert response.status_code == 200
        assert update.await_args.kwargs == {"order": 3}

    def test_content_for_unknown_module(self, client, mock_db):
        with patch(
            "core.courses.importer.get_module_content",
            new=AsyncMock(side_effect=CourseModuleNotFoundError("Module not found")),
        ):
            response = client.get(f"/api/modules/{uuid.uuid4()}/content")

        assert response.status_code == 404

    def test_progress(self, client, mock_db):
        module_id, user_id = uuid.uuid4(), uuid.uuid4()
        a, b = uuid.uuid4(), uuid.uuid4()
        result = summarize_module(module_id, user_id, [a, b], {a: {"completed": True}})

        with (
            patch(
                "web_api.routes.modules.get_module",
                new=AsyncMock(return_value={"id": module_id}),
            ),
            patch(
                "web_api.routes.modules.calculate_module_progress",
                new=AsyncMock(return_value=result),
            ),
        ):
            response = client.get(
                f"/api/modules/{module_id}/progress", params={"user_id": str(user_id)}
            )

        data = response.json()["data"]
        assert data["completed_items"] == 1
        assert data["total_items"] == 2
        assert data["completion_pct"] == 50.0
        assert data["is_completed"] is False


class TestContentItems:
    def test_file_exists(self, client, mock_db):
        item = {
            "id": str(uuid.uuid4()),
            "relative_path": os.path.join("python-basics", "Module1", "video.mp4"),
        }
        with patch(
            "core.queries.courses.get_content_item", new=AsyncMock(return_value=item)
        ):
            response = client.get(f"/api/content/{item['id']}/exists")

        assert response.json()["data"] == {"exists": True}

    def test_file_exists_unknown_item(self, client, mock_db):
        with patch(
            "core.queries.courses.get_content_item", new=AsyncMock(return_value=None)
        ):
            response = client.get(f"/api/content/{uuid.uuid4()}/exists")

        assert response.status_code == 404

    def test_update_empty_title(self, client, mock_db):
        response = client.patch(f"/api/content/{uuid.uuid4()}", json={"title": ""})
        assert response.status_code == 400


class TestRecordingProgress:
    def test_progress_requires_user(self, client, mock_db):
        response = client.post(
            f"/api/content/{uuid.uuid4()}/progress", json={"progress_pct": 10}
        )
        assert response.status_code == 400

    def test_progress_out_of_range(self, client, mock_db, active_profile_id):
        response = client.post(
            f"/api/content/{uuid.uuid4()}/progress", json={"progress_pct": 120}
        )
        assert response.status_code == 422

    def test_progress_below_100_not_completed(
        self, client, mock_db, known_rows, active_profile_id
    ):
        with _echo_upsert():
            response = client.post(
                f"/api/content/{uuid.uuid4()}/progress",
                json={"progress_pct": 60, "last_position": 42},
            )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["completed"] is False
        assert data["progress_pct"] == 60
        assert data["last_position"] == 42
        assert data["user_id"] == str(active_profile_id)

    def test_progress_at_100_completes(self, client, mock_db, known_rows, active_profile_id):
        with _echo_upsert():
            response = client.post(
                f"/api/content/{uuid.uuid4()}/progress", json={"progress_pct": 100}
            )

        assert response.json()["data"]["completed"] is True

    def test_complete(self, client, mock_db, known_rows):
        user_id = uuid.uuid4()
        with _echo_upsert():
            response = client.post(
                f"/api/content/{uuid.uuid4()}/complete", params={"user_id": str(user_id)}
            )

        data = response.json()["data"]
        assert data["completed"] is True
        assert data["progress_pct"] == 100.0
        assert data["user_id"] == str(user_id)

    def test_complete_unknown_item(self, client, mock_db, active_profile_id):
        with (
            patch(
                "core.courses.progress.get_profile_by_id",
                new=AsyncMock(return_value={"id": "p"}),
            ),
            patch(
                "core.courses.progress.get_content_item",
                new=AsyncMock(return_value=None),
            ),
        ):
            response = client.post(f"/api/content/{uuid.uuid4()}/complete")

        assert response.status_code == 404


class TestUserProgressSummary:
    def test_summary(self, client, mock_db):
        user_id = uuid.uuid4()
        summary = ProgressSummary(
            user_id=user_id, total_courses=3, completed_courses=1, in_progress_courses=1
        )
        with (
            patch(
                "web_api.routes.users.get_profile_by_id",
                new=AsyncMock(return_value={"id": user_id}),
            ),
            patch(
                "web_api.routes.users.get_user_progress_summary",
                new=AsyncMock(return_value=summary),
            ),
        ):
            response = client.get(f"/api/users/{user_id}/progress")

        assert response.json()["data"] == {
            "user_id": str(user_id),
            "total_courses": 3,
            "completed_courses": 1,
            "in_progress_courses": 1,
        }

    def test_unknown_user(self, client, mock_db):
        with patch(
            "web_api.routes.users.get_profile_by_id", new=AsyncMock(return_value=None)
        ):
            response = client.get(f"/api/users/{uuid.uuid4()}/progress")

        assert response.status_code == 404
