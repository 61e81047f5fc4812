"""
Content item API routes.

Endpoints:
- PATCH /api/content/{item_id} - Change title/description/order
- GET /api/content/{item_id}/exists - Whether the file is still on disk
- POST /api/content/{item_id}/progress - Record viewing progress
- POST /api/content/{item_id}/complete - Mark as completed
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from core.courses import CourseParser, importer
from core.courses.progress import (
    mark_content_item_completed,
    update_content_item_progress,
)
from core.database import get_connection, get_transaction
from core.exceptions import ContentItemNotFoundError, NotFoundError, PersistenceError
from web_api.auth import resolve_user_id
from web_api.dependencies import get_parser

router = APIRouter(prefix="/api/content", tags=["content"])


class UpdateContentItemRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    order: int | None = None


class ProgressUpdateRequest(BaseModel):
    progress_pct: float = Field(ge=0, le=100)
    last_position: int = 0  # seconds into a video


@router.patch("/{item_id}")
async def update_content_item(item_id: UUID, body: UpdateContentItemRequest):
    try:
        async with get_transaction() as conn:
            item = await importer.update_content_item(
                conn, item_id, **body.model_dump(exclude_none=True)
            )
    except ValueError as e:
        raise HTTPException(400, str(e))
    except ContentItemNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Content item updated successfully", "data": item}


@router.get("/{item_id}/exists")
async def content_exists(item_id: UUID, parser: CourseParser = Depends(get_parser)):
    try:
        async with get_connection() as conn:
            exists = await importer.content_file_exists(conn, parser, item_id)
    except ContentItemNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "File check completed", "data": {"exists": exists}}


@router.post("/{item_id}/progress")
async def update_progress(
    item_id: UUID,
    body: ProgressUpdateRequest,
    user_id: UUID = Depends(resolve_user_id),
):
    """Record progress; reaching 100% marks the item completed."""
    try:
        async with get_transaction() as conn:
            record = await update_content_item_progress(
                conn,
                user_id=user_id,
                content_item_id=item_id,
                progress_pct=body.progress_pct,
                last_position=body.last_position,
            )
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except PersistenceError as e:
        raise HTTPException(500, str(e))
    return {"message": "Progress updated successfully", "data": record}


@router.post("/{item_id}/complete")
async def complete_content(item_id: UUID, user_id: UUID = Depends(resolve_user_id)):
    try:
        async with get_transaction() as conn:
            record = await mark_content_item_completed(
                conn, user_id=user_id, content_item_id=item_id
            )
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except PersistenceError as e:
        raise HTTPException(500, str(e))
    return {"message": "Content marked as completed", "data": record}
