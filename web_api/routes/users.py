"""
User progress API routes.

Endpoints:
- GET /api/users/{user_id}/progress - Completed / in-progress course counts
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException

from core.courses.progress import get_user_progress_summary
from core.database import get_connection
from core.queries.profiles import get_profile_by_id

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/progress")
async def get_progress_summary(user_id: UUID):
    async with get_connection() as conn:
        if await get_profile_by_id(conn, user_id) is None:
            raise HTTPException(404, f"Profile not found: {user_id}")
        summary = await get_user_progress_summary(conn, user_id)
    return {"message": "Progress summary retrieved successfully", "data": summary.to_dict()}
