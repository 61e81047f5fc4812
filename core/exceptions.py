"""Exceptions raised by the course library core.

Routes translate these into HTTP errors:
- PathNotAccessibleError -> 400
- NotFoundError (and subclasses) -> 404
- PersistenceError -> 500

Invalid input is raised as plain ValueError before any I/O happens.
"""


class PathNotAccessibleError(Exception):
    """Raised when a course directory is missing or cannot be read."""

    pass


class CoursePathNotDirectoryError(PathNotAccessibleError):
    """Raised when a course path exists but is not a directory."""

    pass


class NotFoundError(Exception):
    """Base class for referenced records that do not exist."""

    pass


class ProfileNotFoundError(NotFoundError):
    pass


class CourseNotFoundError(NotFoundError):
    pass


class CourseModuleNotFoundError(NotFoundError):
    pass


class ContentItemNotFoundError(NotFoundError):
    pass


class PersistenceError(Exception):
    """Raised when the database rejects or fails an operation."""

    pass
