"""
Course import and catalog operations.

Parsing (core.courses.parser) never touches the database; this module
persists ParsedCourse trees and serves the imported catalog back out.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any
from uuid import UUID

import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from core.database import get_transaction
from core.exceptions import (
    ContentItemNotFoundError,
    CourseModuleNotFoundError,
    CourseNotFoundError,
    PathNotAccessibleError,
    PersistenceError,
)
from core.queries import courses as course_queries

from .parser import CourseParser
from .types import DirectoryInfo, ParsedCourse

logger = logging.getLogger(__name__)

# Only these fields may change after import
MUTABLE_FIELDS = ("title", "description", "order")


# =====================================================
# Persisting parsed trees
# =====================================================


async def create_course(
    conn: AsyncConnection,
    parsed: ParsedCourse,
    creator_id: UUID | None,
) -> dict[str, Any]:
    """
    Insert a parsed course with its modules and content items.

    Module order is the position in parsed.modules; item order is the
    position in the module's flattened item list.

    Raises:
        ValueError: If the title or relative path is empty
        PersistenceError: If any insert fails
    """
    if not parsed.title:
        raise ValueError("course title is required")
    if not parsed.relative_path:
        raise ValueError("course relative path is required")

    try:
        course = await course_queries.create_course(
            conn,
            title=parsed.title,
            description=parsed.description,
            relative_path=parsed.relative_path,
            creator_id=creator_id,
        )
    except SQLAlchemyError as e:
        raise PersistenceError(f"failed to create course: {e}") from e

    course["modules"] = []
    for module_index, parsed_module in enumerate(parsed.modules):
        try:
            module = await course_queries.create_module(
                conn,
                course_id=course["id"],
                title=parsed_module.title,
                description=parsed_module.description,
                relative_path=parsed_module.relative_path,
                order=module_index,
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to create module: {e}") from e

        module["content_items"] = []
        for item_index, parsed_item in enumerate(parsed_module.content_items):
            try:
                item = await course_queries.create_content_item(
                    conn,
                    module_id=module["id"],
                    title=parsed_item.title,
                    description=parsed_item.description,
                    relative_path=parsed_item.relative_path,
                    content_type=parsed_item.content_type,
                    duration=parsed_item.duration,
                    size=parsed_item.size,
                    order=item_index,
                )
            except SQLAlchemyError as e:
                raise PersistenceError(f"failed to create content item: {e}") from e
            module["content_items"].append(item)

        course["modules"].append(module)

    logger.info(
        f"Created course '{course['title']}' with {len(course['modules'])} modules"
    )
    return course


async def import_course(
    parser: CourseParser,
    directory_path: str,
    creator_id: UUID | None,
    title: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """
    Parse a course directory and persist it in one transaction.

    Args:
        parser: Parser bound to the configured courses directory
        directory_path: Absolute path, or path relative to the courses directory
        creator_id: Profile that imported the course
        title: Overrides the directory name as course title
        description: Overrides the synthesized description

    Raises:
        PathNotAccessibleError: If the directory is missing or unreadable
        CoursePathNotDirectoryError: If the path is not a directory
        PersistenceError: If the course could not be stored
    """
    logger.info(f"Importing course from {directory_path}")
    # The directory walk is blocking; keep it off the event loop
    parsed = await asyncio.to_thread(parser.parse_course_folder, directory_path)
    if title:
        parsed.title = title
    if description:
        parsed.description = description

    async with get_transaction() as conn:
        return await create_course(conn, parsed, creator_id)


# =====================================================
# Reading the catalog
# =====================================================


async def get_course_tree(conn: AsyncConnection, course_id: UUID) -> dict[str, Any]:
    """
    Load a course with its modules and their content items, all in order.

    Raises:
        CourseNotFoundError: If the course does not exist
    """
    course = await course_queries.get_course(conn, course_id)
    if course is None:
        raise CourseNotFoundError(f"Course not found: {course_id}")

    modules = await course_queries.list_modules_by_course(conn, course_id)
    for module in modules:
        module["content_items"] = await course_queries.list_content_items_by_module(
            conn, module["id"]
        )
    course["modules"] = modules
    return course


async def list_courses_with_tree(conn: AsyncConnection) -> list[dict[str, Any]]:
    """All courses with their trees; a tree that fails to load is left empty."""
    result = []
    for course in await course_queries.list_courses(conn):
        try:
            result.append(await get_course_tree(conn, course["id"]))
        except (CourseNotFoundError, SQLAlchemyError) as e:
            logger.warning(f"Could not load modules for course {course['id']}: {e}")
            course["modules"] = []
            result.append(course)
    return result


async def get_module_content(
    conn: AsyncConnection, module_id: UUID
) -> list[dict[str, Any]]:
    """Content items of a module in display order."""
    if await course_queries.get_module(conn, module_id) is None:
        raise CourseModuleNotFoundError(f"Module not found: {module_id}")
    return await course_queries.list_content_items_by_module(conn, module_id)


# =====================================================
# Editing
# =====================================================


def _mutable_updates(updates: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in updates.items() if k in MUTABLE_FIELDS and v is not None}


async def update_course_metadata(
    conn: AsyncConnection,
    course_id: UUID,
    title: str,
    description: str | None = None,
) -> dict[str, Any]:
    """Change a course's title and description."""
    if not title or not title.strip():
        raise ValueError("course title is required")

    values = {"title": title}
    if description is not None:
        values["description"] = description

    course = await course_queries.update_course(conn, course_id, **values)
    if course is None:
        raise CourseNotFoundError(f"Course not found: {course_id}")
    return course


async def update_module(
    conn: AsyncConnection, module_id: UUID, **updates: Any
) -> dict[str, Any]:
    """Change a module's title, description or order."""
    values = _mutable_updates(updates)
    if "title" in values and not values["title"].strip():
        raise ValueError("module title cannot be empty")
    if not values:
        module = await course_queries.get_module(conn, module_id)
    else:
        module = await course_queries.update_module(conn, module_id, **values)
    if module is None:
        raise CourseModuleNotFoundError(f"Module not found: {module_id}")
    return module


async def update_content_item(
    conn: AsyncConnection, item_id: UUID, **updates: Any
) -> dict[str, Any]:
    """Change a content item's title, description or order."""
    values = _mutable_updates(updates)
    if "title" in values and not values["title"].strip():
        raise ValueError("content item title cannot be empty")
    if not values:
        item = await course_queries.get_content_item(conn, item_id)
    else:
        item = await course_queries.update_content_item(conn, item_id, **values)
    if item is None:
        raise ContentItemNotFoundError(f"Content item not found: {item_id}")
    return item


async def delete_course(conn: AsyncConnection, course_id: UUID) -> None:
    """Delete a course and (by cascade) its modules and items. Files stay on disk."""
    if not await course_queries.delete_course(conn, course_id):
        raise CourseNotFoundError(f"Course not found: {course_id}")
    logger.info(f"Deleted course {course_id}")


async def content_file_exists(
    conn: AsyncConnection, parser: CourseParser, item_id: UUID
) -> bool:
    """Whether the file behind a content item is still under the courses directory."""
    item = await course_queries.get_content_item(conn, item_id)
    if item is None:
        raise ContentItemNotFoundError(f"Content item not found: {item_id}")
    return await asyncio.to_thread(parser.file_exists, item["relative_path"])


# =====================================================
# Scanning and batch import
# =====================================================


def find_new_directories(
    directories: list[DirectoryInfo],
    course_paths: list[str],
    base_path: str,
) -> list[DirectoryInfo]:
    """
    Directories on disk that have no imported course yet.

    A directory counts as imported when either its path joined to base_path
    or its bare relative path equals a stored course path, since older
    imports may have stored either form. Listing order is kept.
    """
    known = set(course_paths)
    return [
        directory
        for directory in directories
        if os.path.join(base_path, directory.relative_path) not in known
        and directory.relative_path not in known
    ]


async def scan_new_courses(
    conn: AsyncConnection, parser: CourseParser
) -> list[DirectoryInfo]:
    """List course directories under the base path that are not imported yet."""
    directories = await asyncio.to_thread(parser.list_course_directories)
    course_paths = await course_queries.list_course_paths(conn)
    new_directories = find_new_directories(
        directories, course_paths, str(parser.base_path)
    )
    logger.info(
        f"Scan found {len(new_directories)} new of {len(directories)} course directories"
    )
    return new_directories


async def _import_batch_entry(
    parser: CourseParser, entry: dict[str, Any], creator_id: UUID | None
) -> dict[str, Any]:
    relative_path = entry.get("relative_path") or ""
    title = entry.get("title") or ""
    if not relative_path:
        raise ValueError(f"relative path is required for course '{title}'")

    title = title or os.path.basename(relative_path.rstrip("/"))
    base_path = entry.get("base_path") or str(parser.base_path)
    directory_path = os.path.join(base_path, relative_path)
    if not await asyncio.to_thread(os.path.isdir, directory_path):
        raise PathNotAccessibleError(
            f"directory does not exist or is not accessible: {directory_path}"
        )

    try:
        return await import_course(parser, directory_path, creator_id, title=title)
    except (PathNotAccessibleError, PersistenceError) as e:
        raise type(e)(f"failed to import course '{title}': {e}") from e


async def batch_import_courses(
    parser: CourseParser,
    inputs: list[dict[str, Any]],
    creator_id: UUID | None,
    on_progress: Callable[[int, int, str], None] | None = None,
) -> tuple[list[dict[str, Any]], list[str]]:
    """
    Import many course directories, one transaction per course.

    Each input is a dict with relative_path and optional title and
    base_path. A failing course is recorded in the error list and the
    batch carries on.

    Args:
        parser: Parser bound to the configured courses directory
        inputs: Courses to import
        creator_id: Profile that started the batch
        on_progress: Called as on_progress(done, total, message) after each course

    Returns:
        Tuple of (imported courses, error messages)
    """
    imported: list[dict[str, Any]] = []
    errors: list[str] = []
    total = len(inputs)

    logger.info(f"Starting batch import of {total} courses")

    for index, entry in enumerate(inputs, start=1):
        try:
            course = await _import_batch_entry(parser, entry, creator_id)
            imported.append(course)
            logger.info(f"Imported course {course['title']} ({course['id']})")
        except (PathNotAccessibleError, PersistenceError, ValueError) as e:
            logger.warning(f"Batch import error: {e}")
            sentry_sdk.capture_exception(e)
            errors.append(str(e))

        if on_progress is not None:
            on_progress(index, total, f"Processed {index} of {total} courses")

    logger.info(
        f"Batch import completed: {len(imported)} successful, {len(errors)} failed"
    )
    return imported, errors
