"""Course import, catalog and progress tracking."""

from .importer import (
    batch_import_courses,
    content_file_exists,
    create_course,
    delete_course,
    find_new_directories,
    get_course_tree,
    get_module_content,
    import_course,
    list_courses_with_tree,
    scan_new_courses,
    update_content_item,
    update_course_metadata,
    update_module,
)
from .parser import CourseParser, classify_content_type
from .progress import (
    calculate_course_progress,
    calculate_module_progress,
    get_user_course_progress,
    get_user_progress_summary,
    mark_content_item_completed,
    track_user_progress,
    update_content_item_progress,
)
from .types import (
    CourseProgress,
    DirectoryInfo,
    ModuleProgress,
    ParsedContentItem,
    ParsedCourse,
    ParsedModule,
    ProgressSummary,
)

__all__ = [
    "CourseParser",
    "classify_content_type",
    "batch_import_courses",
    "content_file_exists",
    "create_course",
    "delete_course",
    "find_new_directories",
    "get_course_tree",
    "get_module_content",
    "import_course",
    "list_courses_with_tree",
    "scan_new_courses",
    "update_content_item",
    "update_course_metadata",
    "update_module",
    "calculate_course_progress",
    "calculate_module_progress",
    "get_user_course_progress",
    "get_user_progress_summary",
    "mark_content_item_completed",
    "track_user_progress",
    "update_content_item_progress",
    "CourseProgress",
    "DirectoryInfo",
    "ModuleProgress",
    "ParsedContentItem",
    "ParsedCourse",
    "ParsedModule",
    "ProgressSummary",
]
