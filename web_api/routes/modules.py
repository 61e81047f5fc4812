"""
Module API routes.

Endpoints:
- PATCH /api/modules/{module_id} - Change title/description/order
- GET /api/modules/{module_id}/content - Content items in display order
- GET /api/modules/{module_id}/progress - Completion for a user
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.courses import importer
from core.courses.progress import calculate_module_progress
from core.database import get_connection, get_transaction
from core.exceptions import CourseModuleNotFoundError
from core.queries.courses import get_module
from web_api.auth import resolve_user_id

router = APIRouter(prefix="/api/modules", tags=["modules"])


class UpdateModuleRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    order: int | None = None


@router.patch("/{module_id}")
async def update_module(module_id: UUID, body: UpdateModuleRequest):
    try:
        async with get_transaction() as conn:
            module = await importer.update_module(
                conn, module_id, **body.model_dump(exclude_none=True)
            )
    except ValueError as e:
        raise HTTPException(400, str(e))
    except CourseModuleNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Module updated successfully", "data": module}


@router.get("/{module_id}/content")
async def get_module_content(module_id: UUID):
    try:
        async with get_connection() as conn:
            items = await importer.get_module_content(conn, module_id)
    except CourseModuleNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Content items retrieved successfully", "data": items}


@router.get("/{module_id}/progress")
async def get_module_progress(
    module_id: UUID, user_id: UUID = Depends(resolve_user_id)
):
    async with get_connection() as conn:
        if await get_module(conn, module_id) is None:
            raise HTTPException(404, f"Module not found: {module_id}")
        progress = await calculate_module_progress(conn, user_id, module_id)
    return {"message": "Module progress retrieved successfully", "data": progress.to_dict()}
