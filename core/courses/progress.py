"""Progress tracking and aggregation.

Leaf user_progress rows are the only source of truth. Module and course
completion are recomputed from them on every read; nothing is cached.

Rules:
- A module with no content items, or a course with no modules, counts as
  completed (completion_pct stays 0).
- Course completion_pct is derived from item totals summed over modules, not
  from averaging module percentages.
- A missing progress row means "never viewed" and counts as not completed.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import sentry_sdk
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from core.exceptions import (
    ContentItemNotFoundError,
    PersistenceError,
    ProfileNotFoundError,
)
from core.queries.courses import (
    get_content_item,
    list_content_items_by_module,
    list_courses,
    list_modules_by_course,
)
from core.queries.profiles import get_profile_by_id
from core.queries.progress import (
    get_progress_for_items,
    list_progress_by_course,
    upsert_user_progress,
)

from .types import CourseProgress, ModuleProgress, ProgressSummary

logger = logging.getLogger(__name__)


def _latest(current: datetime | None, candidate: datetime | None) -> datetime | None:
    if candidate is None:
        return current
    if current is None or candidate > current:
        return candidate
    return current


def summarize_module(
    module_id: UUID,
    user_id: UUID,
    content_item_ids: list[UUID],
    progress_map: dict[UUID, dict[str, Any]],
) -> ModuleProgress:
    """Roll a module's leaf progress rows up into a ModuleProgress."""
    total = len(content_item_ids)
    if total == 0:
        return ModuleProgress(
            module_id=module_id,
            user_id=user_id,
            completed_items=0,
            total_items=0,
            completion_pct=0.0,
            is_completed=True,
        )

    completed = 0
    last_accessed = None
    for item_id in content_item_ids:
        record = progress_map.get(item_id)
        if record is None:
            continue
        if record.get("completed"):
            completed += 1
        last_accessed = _latest(last_accessed, record.get("last_accessed"))

    return ModuleProgress(
        module_id=module_id,
        user_id=user_id,
        completed_items=completed,
        total_items=total,
        completion_pct=100 * completed / total,
        is_completed=completed == total,
        last_accessed_at=last_accessed,
    )


def summarize_course(
    course_id: UUID,
    user_id: UUID,
    module_progress: list[ModuleProgress],
    total_modules: int,
) -> CourseProgress:
    """Roll module results up into a CourseProgress.

    total_modules is the number of modules the course has; module_progress
    may be shorter when some modules could not be computed.
    """
    if total_modules == 0:
        return CourseProgress(
            course_id=course_id,
            user_id=user_id,
            completed_modules=0,
            total_modules=0,
            completed_items=0,
            total_items=0,
            completion_pct=0.0,
            is_completed=True,
        )

    completed_modules = sum(1 for mp in module_progress if mp.is_completed)
    completed_items = sum(mp.completed_items for mp in module_progress)
    total_items = sum(mp.total_items for mp in module_progress)

    last_accessed = None
    for mp in module_progress:
        last_accessed = _latest(last_accessed, mp.last_accessed_at)

    return CourseProgress(
        course_id=course_id,
        user_id=user_id,
        completed_modules=completed_modules,
        total_modules=total_modules,
        completed_items=completed_items,
        total_items=total_items,
        completion_pct=100 * completed_items / total_items if total_items else 0.0,
        is_completed=completed_modules == total_modules,
        last_accessed_at=last_accessed,
    )


async def calculate_module_progress(
    conn: AsyncConnection, user_id: UUID, module_id: UUID
) -> ModuleProgress:
    """Compute a user's completion of one module."""
    items = await list_content_items_by_module(conn, module_id)
    item_ids = [item["id"] for item in items]
    progress_map = await get_progress_for_items(
        conn, user_id=user_id, content_item_ids=item_ids
    )
    return summarize_module(module_id, user_id, item_ids, progress_map)


async def calculate_course_progress(
    conn: AsyncConnection, user_id: UUID, course_id: UUID
) -> CourseProgress:
    """
    Compute a user's completion of a whole course.

    A module whose progress cannot be computed is logged and left out of the
    sums instead of failing the whole course.
    """
    modules = await list_modules_by_course(conn, course_id)

    results = []
    for module in modules:
        try:
            results.append(
                await calculate_module_progress(conn, user_id, module["id"])
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Error calculating module progress for {module['id']}: {e}"
            )
            sentry_sdk.capture_exception(e)

    return summarize_course(course_id, user_id, results, total_modules=len(modules))


async def get_user_progress_summary(
    conn: AsyncConnection, user_id: UUID
) -> ProgressSummary:
    """
    Count completed and in-progress courses for a user.

    Courses whose progress cannot be computed are skipped and not counted
    as either.
    """
    courses = await list_courses(conn)

    completed = 0
    in_progress = 0
    for course in courses:
        try:
            progress = await calculate_course_progress(conn, user_id, course["id"])
        except SQLAlchemyError as e:
            logger.warning(f"Skipping course {course['id']} in progress summary: {e}")
            continue

        if progress.is_completed:
            completed += 1
        elif progress.completed_items > 0:
            in_progress += 1

    return ProgressSummary(
        user_id=user_id,
        total_courses=len(courses),
        completed_courses=completed,
        in_progress_courses=in_progress,
    )


async def get_user_course_progress(
    conn: AsyncConnection, user_id: UUID, course_id: UUID
) -> list[dict[str, Any]]:
    """Raw progress rows a user has within a course."""
    return await list_progress_by_course(conn, user_id=user_id, course_id=course_id)


async def track_user_progress(
    conn: AsyncConnection,
    *,
    user_id: UUID,
    content_item_id: UUID,
    completed: bool,
    progress_pct: float,
    last_position: int = 0,
) -> dict[str, Any]:
    """
    Record progress for one content item, creating or overwriting its row.

    completed is taken as given. last_accessed is always stamped with the
    current time; last_position is only stored when positive.

    Raises:
        ProfileNotFoundError: If the user profile does not exist
        ContentItemNotFoundError: If the content item does not exist
        PersistenceError: If the write fails
    """
    if await get_profile_by_id(conn, user_id) is None:
        raise ProfileNotFoundError(f"Profile not found: {user_id}")
    if await get_content_item(conn, content_item_id) is None:
        raise ContentItemNotFoundError(f"Content item not found: {content_item_id}")

    try:
        return await upsert_user_progress(
            conn,
            user_id=user_id,
            content_item_id=content_item_id,
            completed=completed,
            progress_pct=progress_pct,
            last_position=last_position if last_position > 0 else None,
            last_accessed=datetime.now(timezone.utc),
        )
    except SQLAlchemyError as e:
        raise PersistenceError(f"error tracking user progress: {e}") from e


async def mark_content_item_completed(
    conn: AsyncConnection, *, user_id: UUID, content_item_id: UUID
) -> dict[str, Any]:
    """Mark an item done: always 100% and completed, clears the playback position."""
    return await track_user_progress(
        conn,
        user_id=user_id,
        content_item_id=content_item_id,
        completed=True,
        progress_pct=100.0,
    )


async def update_content_item_progress(
    conn: AsyncConnection,
    *,
    user_id: UUID,
    content_item_id: UUID,
    progress_pct: float,
    last_position: int = 0,
) -> dict[str, Any]:
    """Record viewing progress; the item counts as completed once it reaches 100%."""
    return await track_user_progress(
        conn,
        user_id=user_id,
        content_item_id=content_item_id,
        completed=progress_pct >= 100.0,
        progress_pct=progress_pct,
        last_position=last_position,
    )
