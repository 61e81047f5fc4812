"""FastAPI dependencies for objects created in the app lifespan."""

from fastapi import Request

from core.courses import CourseParser
from core.sessions import SessionStore
from core.tasks import TaskRegistry


def get_parser(request: Request) -> CourseParser:
    return request.app.state.course_parser


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_task_registry(request: Request) -> TaskRegistry:
    return request.app.state.task_registry
