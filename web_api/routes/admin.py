"""
Admin API routes.

Endpoints:
- POST /api/admin/factory-reset - Delete all profiles, courses and progress
- GET /api/admin/stats - Profile and course counts
"""

from fastapi import APIRouter, Depends

from core import admin
from core.sessions import SessionStore
from core.tasks import TaskRegistry
from web_api.dependencies import get_session_store, get_task_registry

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/factory-reset")
async def factory_reset(
    session_store: SessionStore = Depends(get_session_store),
    task_registry: TaskRegistry = Depends(get_task_registry),
):
    """Wipe the database. Course files on disk are left alone."""
    await admin.factory_reset(session_store, task_registry)
    return {"message": "Factory reset completed successfully", "data": None}


@router.get("/stats")
async def get_stats():
    stats = await admin.get_database_stats()
    return {"message": "Database stats retrieved successfully", "data": stats}
