# web_api/routes/courses.py
"""
Course API routes.

Endpoints:
- GET /api/courses - All courses with their module trees
- POST /api/courses - Import one course directory
- GET /api/courses/directories - Course directories under the base path
- GET /api/courses/scan - Directories not imported yet
- POST /api/courses/batch - Import many directories in the background
- GET /api/courses/{course_id} - One course with its module tree
- PATCH /api/courses/{course_id} - Change title/description
- DELETE /api/courses/{course_id} - Delete a course (files stay on disk)
- GET /api/courses/{course_id}/modules - Modules with content items
- GET /api/courses/{course_id}/progress - Completion for a user
- GET /api/courses/{course_id}/progress/records - Raw progress rows for a user
"""

import asyncio
import logging
from uuid import UUID

import sentry_sdk
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.courses import CourseParser
from core.courses import importer
from core.courses.progress import calculate_course_progress, get_user_course_progress
from core.database import get_connection, get_transaction
from core.enums import TaskStatus
from core.exceptions import CourseNotFoundError, PathNotAccessibleError, PersistenceError
from core.queries.courses import get_course
from core.tasks import TaskRegistry
from web_api.auth import require_active_profile, resolve_user_id
from web_api.dependencies import get_parser, get_task_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])

# Strong references so running imports are not garbage collected
_background_tasks: set[asyncio.Task] = set()


class CreateCourseRequest(BaseModel):
    directory_path: str
    title: str | None = None
    description: str | None = None


class BatchCourseInput(BaseModel):
    relative_path: str = ""
    title: str | None = None
    base_path: str | None = None


class BatchImportRequest(BaseModel):
    courses: list[BatchCourseInput]


class UpdateCourseRequest(BaseModel):
    title: str
    description: str | None = None


@router.get("")
async def list_courses():
    async with get_connection() as conn:
        courses = await importer.list_courses_with_tree(conn)
    return {"message": "Courses retrieved successfully", "data": courses}


@router.post("", status_code=201)
async def create_course(
    body: CreateCourseRequest,
    user_id: UUID = Depends(require_active_profile),
    parser: CourseParser = Depends(get_parser),
):
    """Import a course directory (absolute, or relative to the courses directory)."""
    if not body.directory_path.strip():
        raise HTTPException(400, "directory_path is required")

    try:
        course = await importer.import_course(
            parser,
            body.directory_path,
            user_id,
            title=body.title,
            description=body.description,
        )
    except PathNotAccessibleError as e:
        raise HTTPException(400, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    except PersistenceError as e:
        logger.error(f"Failed to import course from {body.directory_path}: {e}")
        raise HTTPException(500, f"Failed to create course: {e}")

    return {"message": "Course created successfully", "data": course}


@router.get("/directories")
async def list_directories(parser: CourseParser = Depends(get_parser)):
    try:
        directories = await asyncio.to_thread(parser.list_course_directories)
    except PathNotAccessibleError as e:
        raise HTTPException(500, str(e))
    return {
        "message": "Directories retrieved successfully",
        "data": [d.to_dict() for d in directories],
    }


@router.get("/scan")
async def scan_courses(parser: CourseParser = Depends(get_parser)):
    try:
        async with get_connection() as conn:
            directories = await importer.scan_new_courses(conn, parser)
    except PathNotAccessibleError as e:
        raise HTTPException(500, str(e))
    return {
        "message": "Scan completed successfully",
        "data": [d.to_dict() for d in directories],
    }


async def _run_batch_import(
    task_registry: TaskRegistry,
    task_id: str,
    parser: CourseParser,
    inputs: list[dict],
    creator_id: UUID,
) -> None:
    """Background body of a batch import. Never raises; failures end up on the task."""
    total = len(inputs)
    task_registry.update_status(task_id, TaskStatus.processing)
    task_registry.set_message(task_id, f"Starting import of {total} courses")

    def on_progress(done: int, total: int, message: str) -> None:
        task_registry.update_progress(task_id, 100 * done / total, message)

    try:
        imported, errors = await importer.batch_import_courses(
            parser, inputs, creator_id, on_progress=on_progress
        )
    except Exception as e:
        logger.exception(f"Batch import task {task_id} crashed")
        sentry_sdk.capture_exception(e)
        task_registry.fail(task_id, f"Batch import failed: {e}")
        return

    result = {
        "success_count": len(imported),
        "failure_count": len(errors),
        "imported_courses": imported,
        "errors": errors,
    }

    if errors and not imported:
        task_registry.fail(task_id, "Failed to import any courses", result)
    elif errors:
        task_registry.set_message(
            task_id, f"Imported {len(imported)} courses with {len(errors)} errors"
        )
        task_registry.complete(task_id, result)
    else:
        task_registry.set_message(
            task_id, f"Successfully imported {len(imported)} courses"
        )
        task_registry.complete(task_id, result)


@router.post("/batch", status_code=202)
async def batch_import(
    body: BatchImportRequest,
    user_id: UUID = Depends(require_active_profile),
    parser: CourseParser = Depends(get_parser),
    task_registry: TaskRegistry = Depends(get_task_registry),
):
    """Start a background import and return the task ID to poll."""
    if not body.courses:
        raise HTTPException(400, "No courses provided for import")

    task_id = task_registry.create("batch_import")
    inputs = [c.model_dump() for c in body.courses]

    task = asyncio.create_task(
        _run_batch_import(task_registry, task_id, parser, inputs, user_id)
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    return {"message": "Import started", "task_id": task_id}


@router.get("/{course_id}")
async def get_course_detail(course_id: UUID):
    try:
        async with get_connection() as conn:
            course = await importer.get_course_tree(conn, course_id)
    except CourseNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Course retrieved successfully", "data": course}


@router.patch("/{course_id}")
async def update_course(course_id: UUID, body: UpdateCourseRequest):
    try:
        async with get_transaction() as conn:
            course = await importer.update_course_metadata(
                conn, course_id, body.title, body.description
            )
    except ValueError as e:
        raise HTTPException(400, str(e))
    except CourseNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Course updated successfully", "data": course}


@router.delete("/{course_id}")
async def delete_course(course_id: UUID):
    try:
        async with get_transaction() as conn:
            await importer.delete_course(conn, course_id)
    except CourseNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Course deleted successfully", "data": None}


@router.get("/{course_id}/modules")
async def get_course_modules(course_id: UUID):
    try:
        async with get_connection() as conn:
            course = await importer.get_course_tree(conn, course_id)
    except CourseNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Modules retrieved successfully", "data": course["modules"]}


@router.get("/{course_id}/progress")
async def get_course_progress(
    course_id: UUID, user_id: UUID = Depends(resolve_user_id)
):
    async with get_connection() as conn:
        if await get_course(conn, course_id) is None:
            raise HTTPException(404, f"Course not found: {course_id}")
        progress = await calculate_course_progress(conn, user_id, course_id)
    return {"message": "Course progress retrieved successfully", "data": progress.to_dict()}


@router.get("/{course_id}/progress/records")
async def get_course_progress_records(
    course_id: UUID, user_id: UUID = Depends(resolve_user_id)
):
    async with get_connection() as conn:
        if await get_course(conn, course_id) is None:
            raise HTTPException(404, f"Course not found: {course_id}")
        records = await get_user_course_progress(conn, user_id, course_id)
    return {"message": "Progress retrieved successfully", "data": records}
