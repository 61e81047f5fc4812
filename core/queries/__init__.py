"""Query layer for database operations using SQLAlchemy Core."""

from .courses import (
    create_content_item,
    create_course,
    create_module,
    delete_course,
    get_content_item,
    get_course,
    get_module,
    list_content_items_by_module,
    list_course_paths,
    list_courses,
    list_modules_by_course,
    update_content_item,
    update_course,
    update_module,
)
from .profiles import (
    create_profile,
    delete_profile_by_name,
    get_profile_by_id,
    list_profiles,
    rename_profile,
)
from .progress import (
    get_progress_for_items,
    get_user_progress,
    list_progress_by_course,
    upsert_user_progress,
)

__all__ = [
    # Courses
    "create_course",
    "get_course",
    "list_courses",
    "list_course_paths",
    "update_course",
    "delete_course",
    # Modules
    "create_module",
    "get_module",
    "list_modules_by_course",
    "update_module",
    # Content items
    "create_content_item",
    "get_content_item",
    "list_content_items_by_module",
    "update_content_item",
    # Profiles
    "list_profiles",
    "create_profile",
    "get_profile_by_id",
    "rename_profile",
    "delete_profile_by_name",
    # Progress
    "upsert_user_progress",
    "get_user_progress",
    "get_progress_for_items",
    "list_progress_by_course",
]
