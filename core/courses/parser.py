# core/courses/parser.py
"""Convert course directories on disk into ParsedCourse trees.

Layout rules:
- Every immediate subdirectory of a course folder becomes one module.
- Every file anywhere below a module directory becomes a content item of
  that module; nested directories are flattened away.
- A course folder without any subdirectory gets a single "Main Content"
  module holding the files found directly in it.

Directory entries are enumerated sorted by name so that module and content
ordering is deterministic across filesystems.

Nothing here touches the database.
"""

import logging
import os
from pathlib import Path

from core.enums import ContentType
from core.exceptions import CoursePathNotDirectoryError, PathNotAccessibleError

from .types import DirectoryInfo, ParsedContentItem, ParsedCourse, ParsedModule

logger = logging.getLogger(__name__)

DEFAULT_MODULE_TITLE = "Main Content"
DEFAULT_MODULE_DESCRIPTION = "Default module for course content"

CONTENT_TYPE_BY_EXTENSION: dict[str, ContentType] = {
    ".mp4": ContentType.video,
    ".avi": ContentType.video,
    ".mov": ContentType.video,
    ".mkv": ContentType.video,
    ".wmv": ContentType.video,
    ".pdf": ContentType.pdf,
    ".md": ContentType.text,
    ".txt": ContentType.text,
    ".jpg": ContentType.image,
    ".jpeg": ContentType.image,
    ".png": ContentType.image,
    ".gif": ContentType.image,
    ".ppt": ContentType.presentation,
    ".pptx": ContentType.presentation,
    ".doc": ContentType.document,
    ".docx": ContentType.document,
    ".xls": ContentType.spreadsheet,
    ".xlsx": ContentType.spreadsheet,
}


def classify_content_type(filename: str) -> ContentType:
    """Map a file name to its content type by extension, ignoring case."""
    _, dot, suffix = filename.rpartition(".")
    if not dot:
        return ContentType.unknown
    return CONTENT_TYPE_BY_EXTENSION.get(f".{suffix.lower()}", ContentType.unknown)


def _sorted_entries(path: str | Path) -> list[os.DirEntry]:
    """List a directory sorted by entry name. Raises OSError if unreadable."""
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


class CourseParser:
    """Reads course folders under a single base directory."""

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        logger.info(f"Initializing CourseParser with base path: {self.base_path}")

    def relative_to_base(self, path: str | Path) -> str:
        """Path relative to the base directory, or the absolute path if outside it."""
        absolute = Path(os.path.abspath(path))
        try:
            return str(absolute.relative_to(os.path.abspath(self.base_path)))
        except ValueError:
            return str(absolute)

    def resolve(self, path: str | Path) -> Path:
        """Absolute paths pass through; relative ones are joined to the base."""
        path = Path(path)
        if path.is_absolute():
            return path
        return self.base_path / path

    def list_course_directories(self) -> list[DirectoryInfo]:
        """
        List the immediate subdirectories of the base directory.

        Size is the directory entry's own stat size, not its contents.

        Raises:
            PathNotAccessibleError: If the base directory cannot be read
        """
        try:
            entries = _sorted_entries(self.base_path)
        except OSError as e:
            raise PathNotAccessibleError(
                f"error reading courses directory: {e}"
            ) from e

        directories = []
        for entry in entries:
            if not entry.is_dir():
                continue
            try:
                size = entry.stat().st_size
            except OSError:
                continue

            directories.append(
                DirectoryInfo(
                    path=os.path.join(self.base_path, entry.name),
                    relative_path=entry.name,
                    name=entry.name,
                    size=size,
                )
            )

        return directories

    def parse_course_folder(self, folder_path: str | Path) -> ParsedCourse:
        """
        Convert a course directory into a ParsedCourse.

        Args:
            folder_path: Directory to import (absolute, or relative to the base)

        Returns:
            ParsedCourse titled after the directory, with its module tree

        Raises:
            PathNotAccessibleError: If the folder cannot be accessed
            CoursePathNotDirectoryError: If the path is not a directory
        """
        # Collapse ".." so the course is titled after the real directory
        folder = Path(os.path.abspath(self.resolve(folder_path)))

        try:
            is_dir = folder.is_dir()
            exists = is_dir or folder.exists()
        except OSError as e:
            raise PathNotAccessibleError(
                f"error accessing course folder {folder}: {e}"
            ) from e
        if not exists:
            raise PathNotAccessibleError(f"course folder does not exist: {folder}")
        if not is_dir:
            raise CoursePathNotDirectoryError(
                f"specified path is not a directory: {folder}"
            )

        modules = self._scan_course_folder(folder)
        relative_path = self.relative_to_base(folder)

        return ParsedCourse(
            title=folder.name,
            description=f"Course located at {relative_path}",
            relative_path=relative_path,
            base_path=str(self.base_path),
            modules=modules,
        )

    def _scan_course_folder(self, folder: Path) -> list[ParsedModule]:
        try:
            entries = _sorted_entries(folder)
        except OSError as e:
            raise PathNotAccessibleError(
                f"error reading course directory {folder}: {e}"
            ) from e

        modules: list[ParsedModule] = []
        for entry in entries:
            if not entry.is_dir():
                continue

            module = ParsedModule(
                title=entry.name,
                description=f"Module: {entry.name}",
                relative_path=self.relative_to_base(entry.path),
                order=len(modules),
            )
            try:
                module.content_items = self._scan_content_recursive(entry.path)
                logger.info(
                    f"Module '{entry.name}' found {len(module.content_items)} content items"
                )
            except OSError as e:
                logger.warning(f"Error scanning module {entry.name}: {e}")

            modules.append(module)

        if not modules:
            try:
                items = self._scan_content_recursive(folder)
            except OSError as e:
                raise PathNotAccessibleError(
                    f"error scanning for content in {folder}: {e}"
                ) from e

            modules.append(
                ParsedModule(
                    title=DEFAULT_MODULE_TITLE,
                    description=DEFAULT_MODULE_DESCRIPTION,
                    relative_path=folder.name,
                    order=0,
                    content_items=items,
                )
            )
            logger.info(f"Created default module with {len(items)} content items")

        logger.info(f"Course parsing completed: found {len(modules)} modules")
        return modules

    def _scan_content_recursive(self, directory: str) -> list[ParsedContentItem]:
        """
        Flatten every file below a directory into content items.

        Unreadable nested directories are logged and skipped. Raises OSError
        only when the starting directory itself cannot be listed.
        """
        items: list[ParsedContentItem] = []

        for index, entry in enumerate(_sorted_entries(directory)):
            if entry.is_dir():
                try:
                    items.extend(self._scan_content_recursive(entry.path))
                except OSError as e:
                    logger.warning(f"Error scanning subdirectory {entry.path}: {e}")
                continue

            try:
                size = entry.stat().st_size
            except OSError as e:
                logger.warning(f"Error getting info for {entry.path}: {e}")
                continue

            items.append(
                ParsedContentItem(
                    title=entry.name,
                    description=f"Content file: {entry.name}",
                    relative_path=self.relative_to_base(entry.path),
                    content_type=classify_content_type(entry.name),
                    size=size,
                    order=index,
                )
            )

        return items

    def file_exists(self, relative_path: str) -> bool:
        """Check whether a path under the base directory still exists."""
        return (self.base_path / relative_path).exists()
