# core/courses/types.py
"""In-memory types for the course importer and progress aggregation.

The importer builds a ParsedCourse tree straight from the filesystem; nothing
in it has been persisted yet. The progress types are derived on every read
from leaf user_progress rows and are never stored.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from uuid import UUID

from core.enums import ContentType


@dataclass
class DirectoryInfo:
    """A directory (or file) found under the courses base directory."""

    path: str  # full path
    relative_path: str  # relative to the courses base directory
    name: str
    size: int  # as reported by stat(), not the size of the contents
    is_dir: bool = True
    extension: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ParsedContentItem:
    """A single file inside a module."""

    title: str
    description: str
    relative_path: str
    content_type: ContentType
    size: int
    order: int  # position among the entries of the directory the file sits in
    duration: int | None = None  # seconds


@dataclass
class ParsedModule:
    """A top-level subdirectory of a course (or the synthesized default)."""

    title: str
    description: str
    relative_path: str
    order: int
    content_items: list[ParsedContentItem] = field(default_factory=list)


@dataclass
class ParsedCourse:
    """A course directory converted into a module/content tree."""

    title: str
    description: str
    relative_path: str
    base_path: str
    modules: list[ParsedModule] = field(default_factory=list)


@dataclass
class ModuleProgress:
    """Completion of one module for one user."""

    module_id: UUID
    user_id: UUID
    completed_items: int
    total_items: int
    completion_pct: float
    is_completed: bool
    last_accessed_at: datetime | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseProgress:
    """Completion of a whole course for one user, rolled up from items."""

    course_id: UUID
    user_id: UUID
    completed_modules: int
    total_modules: int
    completed_items: int
    total_items: int
    completion_pct: float
    is_completed: bool
    last_accessed_at: datetime | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProgressSummary:
    """Course counts for one user across the whole library."""

    user_id: UUID
    total_courses: int
    completed_courses: int
    in_progress_courses: int

    def to_dict(self) -> dict:
        return asdict(self)
