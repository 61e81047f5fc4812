"""
In-memory registry of background tasks.

Long operations (batch course import) run detached from the request that
started them; the client gets a task ID back and polls the registry for
status. The registry lives in process memory only and is lost on restart.

Finished tasks are removed by a periodic APScheduler job so the map does
not grow forever.
"""

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.enums import TaskStatus

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (TaskStatus.completed, TaskStatus.failed)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    id: str
    type: str
    status: TaskStatus = TaskStatus.pending
    progress: float = 0.0  # 0-100
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    message: str = ""
    error_message: str = ""
    result: Any = None

    def to_dict(self) -> dict:
        return asdict(self)


class TaskRegistry:
    """Thread-safe map of task ID to Task.

    Readers get snapshot dicts, never the live Task, so a poll never sees a
    half-applied update.
    """

    def __init__(self):
        self._tasks: dict[str, Task] = {}
        self._lock = threading.RLock()
        self._scheduler: AsyncIOScheduler | None = None

    def create(self, task_type: str) -> str:
        task = Task(id=str(uuid4()), type=task_type)
        with self._lock:
            self._tasks[task.id] = task
        logger.info(f"Created {task_type} task {task.id}")
        return task.id

    def get(self, task_id: str) -> dict | None:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.to_dict() if task else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def update_status(self, task_id: str, status: TaskStatus) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            task.status = status
            if status == TaskStatus.processing and task.started_at is None:
                task.started_at = _now()
            if status in TERMINAL_STATUSES:
                task.completed_at = _now()

    def update_progress(self, task_id: str, progress: float, message: str) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            task.progress = progress
            task.message = message

    def set_message(self, task_id: str, message: str) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is not None:
                task.message = message

    def fail(self, task_id: str, message: str, result: Any = None) -> None:
        """Mark a task as failed. Failed tasks are never retried."""
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            task.status = TaskStatus.failed
            task.error_message = message
            task.result = result
            task.completed_at = _now()
        logger.warning(f"Task {task_id} failed: {message}")

    def complete(self, task_id: str, result: Any = None) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return
            task.status = TaskStatus.completed
            task.progress = 100.0
            task.result = result
            task.completed_at = _now()

    def cleanup(self, max_age: timedelta) -> int:
        """
        Remove finished tasks that completed more than max_age ago.

        Pending and processing tasks are always kept.

        Returns:
            Number of tasks removed
        """
        cutoff = _now() - max_age
        with self._lock:
            expired = [
                task_id
                for task_id, task in self._tasks.items()
                if task.status in TERMINAL_STATUSES
                and task.completed_at is not None
                and task.completed_at < cutoff
            ]
            for task_id in expired:
                del self._tasks[task_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} old tasks")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._tasks.clear()

    # -----------------------------------------------------
    # Periodic cleanup
    # -----------------------------------------------------

    def start_cleanup(self, interval: timedelta, max_age: timedelta) -> AsyncIOScheduler:
        """
        Start an APScheduler job that runs cleanup(max_age) every interval.

        Must be called with a running event loop (FastAPI lifespan).
        """
        if self._scheduler is not None:
            return self._scheduler

        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )
        self._scheduler.add_job(
            self.cleanup,
            trigger="interval",
            seconds=interval.total_seconds(),
            kwargs={"max_age": max_age},
            id="task_cleanup",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"Task cleanup scheduled every {interval}")
        return self._scheduler

    def stop_cleanup(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Task cleanup stopped")
