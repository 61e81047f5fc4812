"""Course, module and content item queries using SQLAlchemy Core."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import ContentType
from ..tables import content_items, courses, modules


# =====================================================
# Courses
# =====================================================


async def create_course(
    conn: AsyncConnection,
    *,
    title: str,
    relative_path: str,
    description: str | None = None,
    creator_id: UUID | None = None,
    course_id: UUID | None = None,
) -> dict[str, Any]:
    """Insert a course row and return it."""
    result = await conn.execute(
        insert(courses)
        .values(
            id=course_id or uuid4(),
            title=title,
            description=description or None,
            creator_id=creator_id,
            relative_path=relative_path,
        )
        .returning(courses)
    )
    return dict(result.mappings().one())


async def get_course(conn: AsyncConnection, course_id: UUID) -> dict[str, Any] | None:
    """Get a course by ID."""
    result = await conn.execute(select(courses).where(courses.c.id == course_id))
    row = result.mappings().first()
    return dict(row) if row else None


async def list_courses(conn: AsyncConnection) -> list[dict[str, Any]]:
    """All courses, newest first."""
    result = await conn.execute(select(courses).order_by(courses.c.created_at.desc()))
    return [dict(row) for row in result.mappings()]


async def list_course_paths(conn: AsyncConnection) -> list[str]:
    """Relative paths of every imported course."""
    result = await conn.execute(select(courses.c.relative_path))
    return [row.relative_path for row in result]


async def update_course(
    conn: AsyncConnection,
    course_id: UUID,
    **updates: Any,
) -> dict[str, Any] | None:
    """Update a course and return the updated record (None if missing)."""
    updates["updated_at"] = datetime.now(timezone.utc)
    result = await conn.execute(
        update(courses)
        .where(courses.c.id == course_id)
        .values(**updates)
        .returning(courses)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def delete_course(conn: AsyncConnection, course_id: UUID) -> bool:
    """Delete a course; modules and content items cascade. Returns True if deleted."""
    result = await conn.execute(delete(courses).where(courses.c.id == course_id))
    return result.rowcount > 0


# =====================================================
# Modules
# =====================================================


async def create_module(
    conn: AsyncConnection,
    *,
    course_id: UUID,
    title: str,
    relative_path: str,
    order: int,
    description: str | None = None,
    module_id: UUID | None = None,
) -> dict[str, Any]:
    """Insert a module row and return it."""
    result = await conn.execute(
        insert(modules)
        .values(
            id=module_id or uuid4(),
            course_id=course_id,
            title=title,
            description=description or None,
            relative_path=relative_path,
            order=order,
        )
        .returning(modules)
    )
    return dict(result.mappings().one())


async def get_module(conn: AsyncConnection, module_id: UUID) -> dict[str, Any] | None:
    """Get a module by ID."""
    result = await conn.execute(select(modules).where(modules.c.id == module_id))
    row = result.mappings().first()
    return dict(row) if row else None


async def list_modules_by_course(
    conn: AsyncConnection, course_id: UUID
) -> list[dict[str, Any]]:
    """Modules of a course in display order."""
    result = await conn.execute(
        select(modules)
        .where(modules.c.course_id == course_id)
        .order_by(modules.c.order.asc())
    )
    return [dict(row) for row in result.mappings()]


async def update_module(
    conn: AsyncConnection,
    module_id: UUID,
    **updates: Any,
) -> dict[str, Any] | None:
    """Update a module and return the updated record (None if missing)."""
    updates["updated_at"] = datetime.now(timezone.utc)
    result = await conn.execute(
        update(modules)
        .where(modules.c.id == module_id)
        .values(**updates)
        .returning(modules)
    )
    row = result.mappings().first()
    return dict(row) if row else None


# =====================================================
# Content items
# =====================================================


async def create_content_item(
    conn: AsyncConnection,
    *,
    module_id: UUID,
    title: str,
    relative_path: str,
    content_type: ContentType,
    order: int,
    description: str | None = None,
    duration: int | None = None,
    size: int | None = None,
    item_id: UUID | None = None,
) -> dict[str, Any]:
    """Insert a content item row and return it."""
    result = await conn.execute(
        insert(content_items)
        .values(
            id=item_id or uuid4(),
            module_id=module_id,
            title=title,
            description=description or None,
            relative_path=relative_path,
            content_type=content_type,
            duration=duration if duration and duration > 0 else None,
            size=size if size and size > 0 else None,
            order=order,
        )
        .returning(content_items)
    )
    return dict(result.mappings().one())


async def get_content_item(
    conn: AsyncConnection, item_id: UUID
) -> dict[str, Any] | None:
    """Get a content item by ID."""
    result = await conn.execute(
        select(content_items).where(content_items.c.id == item_id)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def list_content_items_by_module(
    conn: AsyncConnection, module_id: UUID
) -> list[dict[str, Any]]:
    """Content items of a module in display order."""
    result = await conn.execute(
        select(content_items)
        .where(content_items.c.module_id == module_id)
        .order_by(content_items.c.order.asc())
    )
    return [dict(row) for row in result.mappings()]


async def update_content_item(
    conn: AsyncConnection,
    item_id: UUID,
    **updates: Any,
) -> dict[str, Any] | None:
    """Update a content item and return the updated record (None if missing)."""
    updates["updated_at"] = datetime.now(timezone.utc)
    result = await conn.execute(
        update(content_items)
        .where(content_items.c.id == item_id)
        .values(**updates)
        .returning(content_items)
    )
    row = result.mappings().first()
    return dict(row) if row else None
