"""Pytest fixtures for core query tests.

These tests run against a real PostgreSQL database with the schema applied
(alembic upgrade head) and are skipped when DATABASE_URL is not set.
"""

import os

import pytest
import pytest_asyncio


def pytest_collection_modifyitems(config, items):
    if os.environ.get("DATABASE_URL"):
        return
    skip = pytest.mark.skip(reason="DATABASE_URL not set")
    for item in items:
        if "db_conn" in getattr(item, "fixturenames", ()):
            item.add_marker(skip)


@pytest_asyncio.fixture
async def db_conn():
    """
    Provide a DB connection that rolls back after each test.

    All changes made during the test are visible within the test,
    but rolled back afterward so DB stays clean.
    """
    from core.database import close_engine, get_engine

    engine = get_engine()

    async with engine.connect() as conn:
        txn = await conn.begin()
        try:
            yield conn
        finally:
            await txn.rollback()

    await close_engine()
