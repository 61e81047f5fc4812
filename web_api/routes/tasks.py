"""
Background task status routes.

Endpoints:
- GET /api/tasks?id= - Task status by query parameter
- GET /api/tasks/{task_id} - Task status
- POST /api/tasks/cleanup?max_age_hours= - Drop finished tasks older than that
"""

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query

from core.tasks import TaskRegistry
from web_api.dependencies import get_task_registry

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _task_or_404(task_registry: TaskRegistry, task_id: str) -> dict:
    task = task_registry.get(task_id)
    if task is None:
        raise HTTPException(404, "Task not found")
    return task


@router.get("")
async def get_task_by_query(
    id: str | None = Query(None),
    task_registry: TaskRegistry = Depends(get_task_registry),
):
    if not id:
        raise HTTPException(400, "Task ID is required")
    return {"message": "Task retrieved successfully", "data": _task_or_404(task_registry, id)}


@router.post("/cleanup")
async def cleanup_tasks(
    max_age_hours: float = Query(24, ge=0),
    task_registry: TaskRegistry = Depends(get_task_registry),
):
    cleaned = task_registry.cleanup(timedelta(hours=max_age_hours))
    return {"message": f"Cleaned up {cleaned} tasks", "data": {"cleaned": cleaned}}


@router.get("/{task_id}")
async def get_task(
    task_id: str, task_registry: TaskRegistry = Depends(get_task_registry)
):
    return {
        "message": "Task retrieved successfully",
        "data": _task_or_404(task_registry, task_id),
    }
