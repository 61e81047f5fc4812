"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    BigInteger,
    MetaData,
    Float,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID

from .enums import content_type_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. PROFILES
# =====================================================
profiles = Table(
    "profiles",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column("name", Text, nullable=False),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
)


# =====================================================
# 2. COURSES
# =====================================================
courses = Table(
    "courses",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column(
        "creator_id",
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    ),
    Column("relative_path", Text, nullable=False),  # relative to courses dir
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_courses_creator_id", "creator_id"),
)


# =====================================================
# 3. MODULES
# =====================================================
modules = Table(
    "modules",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column(
        "course_id",
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("relative_path", Text, nullable=False),
    Column("order", Integer, nullable=False, server_default="0"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_modules_course_id", "course_id"),
)


# =====================================================
# 4. CONTENT ITEMS
# =====================================================
content_items = Table(
    "content_items",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column(
        "module_id",
        UUID(as_uuid=True),
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("relative_path", Text, nullable=False),
    Column("content_type", content_type_enum, nullable=False),
    Column("duration", Integer),  # seconds
    Column("size", BigInteger),  # bytes
    Column("order", Integer, nullable=False, server_default="0"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_content_items_module_id", "module_id"),
)


# =====================================================
# 5. USER PROGRESS
# =====================================================
# One row per (profile, content item). Absence means "never viewed".
user_progress = Table(
    "user_progress",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "content_item_id",
        UUID(as_uuid=True),
        ForeignKey("content_items.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("completed", Boolean, nullable=False, server_default="false"),
    Column("progress_pct", Float, nullable=False, server_default="0"),
    Column("last_position", Integer),  # seconds, for video playback
    Column("last_accessed", TIMESTAMP(timezone=True)),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    UniqueConstraint("user_id", "content_item_id"),
    Index("idx_user_progress_user_id", "user_id"),
    Index("idx_user_progress_content_item_id", "content_item_id"),
)


# =====================================================
# 6. SESSIONS
# =====================================================
# At most one row: the profile currently selected on this installation.
sessions = Table(
    "sessions",
    metadata,
    Column("id", UUID(as_uuid=True), primary_key=True),
    Column(
        "user_id",
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_sessions_user_id", "user_id"),
)
