# web_api/tests/conftest.py
"""Pytest fixtures for web API tests.

The app is used without its lifespan: fixtures put a parser for a temporary
courses directory, a fresh SessionStore and a fresh TaskRegistry on
app.state, so no database or real course folder is needed. Route tests
patch the core/query functions they exercise.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from core.courses import CourseParser
from core.sessions import SessionStore
from core.tasks import TaskRegistry


@pytest.fixture
def app(courses_dir):
    from main import app

    app.state.course_parser = CourseParser(courses_dir)
    app.state.session_store = SessionStore()
    app.state.task_registry = TaskRegistry()
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def active_profile_id(app):
    """Select a profile without touching the database."""
    profile_id = uuid.uuid4()
    app.state.session_store._set({"id": uuid.uuid4(), "user_id": profile_id})
    return profile_id
