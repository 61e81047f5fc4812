"""
Core business logic - framework-agnostic.
Used by the web API; nothing in here imports FastAPI.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine

# Errors
from .exceptions import (
    PathNotAccessibleError, CoursePathNotDirectoryError,
    NotFoundError, ProfileNotFoundError, CourseNotFoundError,
    CourseModuleNotFoundError, ContentItemNotFoundError, PersistenceError,
)

# Enums
from .enums import ContentType, TaskStatus

# Course import, catalog and progress
from .courses import CourseParser, classify_content_type

# Session context and background tasks
from .sessions import SessionStore
from .tasks import Task, TaskRegistry


__all__ = [
    # Database
    'get_connection', 'get_transaction', 'get_engine', 'close_engine',
    # Errors
    'PathNotAccessibleError', 'CoursePathNotDirectoryError',
    'NotFoundError', 'ProfileNotFoundError', 'CourseNotFoundError',
    'CourseModuleNotFoundError', 'ContentItemNotFoundError', 'PersistenceError',
    # Enums
    'ContentType', 'TaskStatus',
    # Courses
    'CourseParser', 'classify_content_type',
    # Sessions / tasks
    'SessionStore', 'Task', 'TaskRegistry',
]
