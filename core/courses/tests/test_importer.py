# core/courses/tests/test_importer.py
"""Tests for persisting parsed courses, scanning and batch import.

The query layer is mocked; these tests check what gets written and how
failures are reported, not SQL.
"""

import asyncio
import os
import threading
import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from core.courses import importer
from core.courses.parser import CourseParser
from core.courses.types import DirectoryInfo, ParsedCourse
from core.exceptions import CourseNotFoundError, PersistenceError


@asynccontextmanager
async def mock_db_connection():
    """Create a mock async context manager for database connections."""
    yield MagicMock()


def _row(**fields) -> dict:
    return {"id": uuid.uuid4(), **fields}


@pytest.fixture
def mock_queries():
    """Patch the insert queries to echo back what they were given."""
    with (
        patch(
            "core.queries.courses.create_course",
            new=AsyncMock(side_effect=lambda conn, **kw: _row(**kw)),
        ) as create_course,
        patch(
            "core.queries.courses.create_module",
            new=AsyncMock(side_effect=lambda conn, **kw: _row(**kw)),
        ) as create_module,
        patch(
            "core.queries.courses.create_content_item",
            new=AsyncMock(side_effect=lambda conn, **kw: _row(**kw)),
        ) as create_content_item,
    ):
        yield MagicMock(
            create_course=create_course,
            create_module=create_module,
            create_content_item=create_content_item,
        )


class TestCreateCourse:
    @pytest.mark.asyncio
    async def test_inserts_full_tree_with_sequential_order(
        self, courses_dir, mock_queries
    ):
        parsed = CourseParser(courses_dir).parse_course_folder("python-basics")
        creator = uuid.uuid4()

        course = await importer.create_course(MagicMock(), parsed, creator)

        assert course["title"] == "python-basics"
        assert course["creator_id"] == creator
        assert [m["order"] for m in course["modules"]] == [0, 1]
        assert [m["title"] for m in course["modules"]] == ["Module1", "Module2"]
        assert [i["order"] for i in course["modules"][0]["content_items"]] == [0, 1]
        assert course["modules"][1]["content_items"] == []
        assert mock_queries.create_content_item.await_count == 2

    @pytest.mark.asyncio
    async def test_rejects_empty_title(self, mock_queries):
        parsed = ParsedCourse(title="", description="", relative_path="x", base_path="/")

        with pytest.raises(ValueError):
            await importer.create_course(MagicMock(), parsed, None)
        mock_queries.create_course.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_empty_relative_path(self, mock_queries):
        parsed = ParsedCourse(title="t", description="", relative_path="", base_path="/")

        with pytest.raises(ValueError):
            await importer.create_course(MagicMock(), parsed, None)
        mock_queries.create_course.assert_not_called()

    @pytest.mark.asyncio
    async def test_wraps_database_errors(self, courses_dir, mock_queries):
        parsed = CourseParser(courses_dir).parse_course_folder("python-basics")
        mock_queries.create_module.side_effect = SQLAlchemyError("boom")

        with pytest.raises(PersistenceError, match="failed to create module"):
            await importer.create_course(MagicMock(), parsed, None)


class TestImportCourse:
    @pytest.mark.asyncio
    async def test_title_and_description_overrides(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir)

        with patch("core.courses.importer.get_transaction", mock_db_connection):
            course = await importer.import_course(
                parser,
                "loose-notes",
                None,
                title="Loose Notes",
                description="Scratch material",
            )

        assert course["title"] == "Loose Notes"
        assert course["description"] == "Scratch material"
        assert course["relative_path"] == "loose-notes"
        assert course["modules"][0]["title"] == "Main Content"


class TestDirectoryWalkOffEventLoop:
    """Filesystem walks run in worker threads so other requests keep being served."""

    @pytest.mark.asyncio
    async def test_parse_runs_in_worker_thread(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir)
        parse = parser.parse_course_folder
        seen = []

        def parse_in_thread(path):
            seen.append(threading.get_ident())
            return parse(path)

        parser.parse_course_folder = parse_in_thread
        with patch("core.courses.importer.get_transaction", mock_db_connection):
            await importer.import_course(parser, "loose-notes", None)

        assert seen and seen[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_loop_keeps_running_during_batch_parse(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir)
        parse = parser.parse_course_folder
        loop_ran = threading.Event()

        def slow_parse(path):
            # Only returns promptly if the event loop is free to set the flag
            assert loop_ran.wait(timeout=5), "event loop was blocked by the parse"
            return parse(path)

        async def tick():
            await asyncio.sleep(0.01)
            loop_ran.set()

        parser.parse_course_folder = slow_parse
        with patch("core.courses.importer.get_transaction", mock_db_connection):
            ticker = asyncio.create_task(tick())
            imported, errors = await importer.batch_import_courses(
                parser, [{"relative_path": "loose-notes"}], None
            )
            await ticker

        assert errors == []
        assert len(imported) == 1

    @pytest.mark.asyncio
    async def test_scan_lists_in_worker_thread(self, courses_dir):
        parser = CourseParser(courses_dir)
        list_dirs = parser.list_course_directories
        seen = []

        def list_in_thread():
            seen.append(threading.get_ident())
            return list_dirs()

        parser.list_course_directories = list_in_thread
        with patch(
            "core.queries.courses.list_course_paths", new=AsyncMock(return_value=[])
        ):
            await importer.scan_new_courses(MagicMock(), parser)

        assert seen and seen[0] != threading.get_ident()


class TestFindNewDirectories:
    def _dirs(self, *names):
        return [
            DirectoryInfo(path=f"/courses/{n}", relative_path=n, name=n, size=4096)
            for n in names
        ]

    def test_excludes_bare_relative_path_matches(self):
        result = importer.find_new_directories(
            self._dirs("a", "b", "c"), ["b"], "/courses"
        )
        assert [d.name for d in result] == ["a", "c"]

    def test_excludes_joined_path_matches(self):
        result = importer.find_new_directories(
            self._dirs("a", "b"), [os.path.join("/courses", "a")], "/courses"
        )
        assert [d.name for d in result] == ["b"]

    def test_keeps_listing_order(self):
        result = importer.find_new_directories(self._dirs("z", "m", "a"), [], "/x")
        assert [d.name for d in result] == ["z", "m", "a"]

    def test_everything_imported(self):
        assert importer.find_new_directories(self._dirs("a"), ["a"], "/courses") == []


class TestScanNewCourses:
    @pytest.mark.asyncio
    async def test_diffs_disk_against_database(self, courses_dir):
        parser = CourseParser(courses_dir)

        with patch(
            "core.queries.courses.list_course_paths",
            new=AsyncMock(return_value=["python-basics"]),
        ):
            result = await importer.scan_new_courses(MagicMock(), parser)

        assert [d.name for d in result] == ["loose-notes"]


class TestBatchImport:
    @pytest.mark.asyncio
    async def test_partial_success(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir)
        progress_calls = []

        with patch("core.courses.importer.get_transaction", mock_db_connection):
            imported, errors = await importer.batch_import_courses(
                parser,
                [
                    {"relative_path": "python-basics"},
                    {"relative_path": "", "title": "Nameless"},
                    {"relative_path": "does-not-exist"},
                    {"relative_path": "loose-notes", "title": "Notes"},
                ],
                uuid.uuid4(),
                on_progress=lambda done, total, msg: progress_calls.append((done, total)),
            )

        assert [c["title"] for c in imported] == ["python-basics", "Notes"]
        assert len(errors) == 2
        assert "relative path is required for course 'Nameless'" in errors[0]
        assert "does-not-exist" in errors[1]
        assert progress_calls == [(1, 4), (2, 4), (3, 4), (4, 4)]

    @pytest.mark.asyncio
    async def test_explicit_base_path(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir / "python-basics")

        with patch("core.courses.importer.get_transaction", mock_db_connection):
            imported, errors = await importer.batch_import_courses(
                parser,
                [{"relative_path": "loose-notes", "base_path": str(courses_dir)}],
                None,
            )

        assert errors == []
        assert len(imported) == 1

    @pytest.mark.asyncio
    async def test_persistence_failure_is_recorded(self, courses_dir, mock_queries):
        parser = CourseParser(courses_dir)
        mock_queries.create_course.side_effect = SQLAlchemyError("db down")

        with patch("core.courses.importer.get_transaction", mock_db_connection):
            imported, errors = await importer.batch_import_courses(
                parser, [{"relative_path": "loose-notes"}], None
            )

        assert imported == []
        assert errors == [
            "failed to import course 'loose-notes': failed to create course: db down"
        ]


class TestCatalog:
    @pytest.mark.asyncio
    async def test_get_course_tree(self):
        course_id = uuid.uuid4()
        module = {"id": uuid.uuid4(), "title": "M"}
        item = {"id": uuid.uuid4(), "title": "v.mp4"}

        with (
            patch(
                "core.queries.courses.get_course",
                new=AsyncMock(return_value={"id": course_id, "title": "C"}),
            ),
            patch(
                "core.queries.courses.list_modules_by_course",
                new=AsyncMock(return_value=[module]),
            ),
            patch(
                "core.queries.courses.list_content_items_by_module",
                new=AsyncMock(return_value=[item]),
            ),
        ):
            course = await importer.get_course_tree(MagicMock(), course_id)

        assert course["modules"][0]["content_items"] == [item]

    @pytest.mark.asyncio
    async def test_get_course_tree_missing(self):
        with patch("core.queries.courses.get_course", new=AsyncMock(return_value=None)):
            with pytest.raises(CourseNotFoundError):
                await importer.get_course_tree(MagicMock(), uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_courses_with_tree_tolerates_broken_tree(self):
        good, bad = {"id": uuid.uuid4()}, {"id": uuid.uuid4()}

        async def modules_for(conn, course_id):
            if course_id == bad["id"]:
                raise SQLAlchemyError("broken")
            return []

        with (
            patch("core.queries.courses.list_courses", new=AsyncMock(return_value=[good, bad])),
            patch(
                "core.queries.courses.get_course",
                new=AsyncMock(side_effect=lambda conn, cid: {"id": cid}),
            ),
            patch(
                "core.queries.courses.list_modules_by_course",
                new=AsyncMock(side_effect=modules_for),
            ),
        ):
            courses = await importer.list_courses_with_tree(MagicMock())

        assert [c["id"] for c in courses] == [good["id"], bad["id"]]
        assert courses[1]["modules"] == []

    @pytest.mark.asyncio
    async def test_update_course_requires_title(self):
        with pytest.raises(ValueError):
            await importer.update_course_metadata(MagicMock(), uuid.uuid4(), "  ")

    @pytest.mark.asyncio
    async def test_update_module_ignores_immutable_fields(self):
        module_id = uuid.uuid4()
        update = AsyncMock(return_value={"id": module_id, "title": "New"})

        with patch("core.queries.courses.update_module", new=update):
            await importer.update_module(
                MagicMock(), module_id, title="New", relative_path="/etc"
            )

        assert update.await_args.kwargs == {"title": "New"}

    @pytest.mark.asyncio
    async def test_delete_missing_course(self):
        with patch("core.queries.courses.delete_course", new=AsyncMock(return_value=False)):
            with pytest.raises(CourseNotFoundError):
                await importer.delete_course(MagicMock(), uuid.uuid4())
