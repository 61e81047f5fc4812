"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


# =====================================================
# Python Enum Classes
# =====================================================


class ContentType(str, enum.Enum):
    video = "video"
    pdf = "pdf"
    text = "text"
    image = "image"
    presentation = "presentation"
    document = "document"
    spreadsheet = "spreadsheet"
    unknown = "unknown"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


# =====================================================
# SQLAlchemy Enum Types
# The PostgreSQL type is created by the initial migration (create_type=False)
# =====================================================

content_type_enum = SQLEnum(
    ContentType, name="content_type", create_type=False, native_enum=True
)
