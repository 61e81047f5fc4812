"""
Centralized configuration for the course library backend.

Settings come from environment variables (loaded from .env / .env.local by
main.py). The courses base directory is resolved and validated exactly once,
at startup, by resolve_courses_base_dir().
"""

import os
from datetime import timedelta
from pathlib import Path


class CoursesDirectoryError(Exception):
    """Raised when the configured courses directory is unusable."""

    pass


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8080"))


def get_courses_base_dir() -> str:
    """
    Get the configured courses directory.

    INTERNAL_COURSES_DIR (set inside containers) wins over COURSES_BASE_DIR
    (local development). Falls back to the current directory.
    """
    return (
        os.environ.get("INTERNAL_COURSES_DIR")
        or os.environ.get("COURSES_BASE_DIR")
        or "."
    )


def resolve_courses_base_dir() -> Path:
    """
    Resolve the courses directory to an absolute path and validate it.

    Returns:
        Absolute path of the courses directory

    Raises:
        CoursesDirectoryError: If the directory is missing, not a directory,
            or cannot be listed
    """
    base = Path(get_courses_base_dir()).expanduser().resolve()

    if not base.exists():
        raise CoursesDirectoryError(f"Courses directory does not exist: {base}")
    if not base.is_dir():
        raise CoursesDirectoryError(f"Courses path is not a directory: {base}")

    try:
        with os.scandir(base) as entries:
            next(entries, None)
    except OSError as e:
        raise CoursesDirectoryError(
            f"Cannot read contents of courses directory {base}: {e}"
        ) from e

    return base


def get_task_cleanup_interval() -> timedelta:
    """How often finished background tasks are swept from the registry."""
    return timedelta(hours=float(os.getenv("TASK_CLEANUP_INTERVAL_HOURS", "1")))


def get_task_max_age() -> timedelta:
    """How long a finished background task stays visible."""
    return timedelta(hours=float(os.getenv("TASK_MAX_AGE_HOURS", "24")))


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants for dev and the configured frontend URL.
    """
    ports = [3000, 5173, get_api_port()]
    hosts = ["localhost", "127.0.0.1"]
    origins = [f"http://{host}:{port}" for host in hosts for port in ports]

    env_frontend = os.environ.get("FRONTEND_URL")
    if env_frontend and env_frontend.rstrip("/") not in origins:
        origins.append(env_frontend.rstrip("/"))

    return origins


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("COURSES_BASE_DIR", "Directory containing course folders", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        if os.environ.get(name):
            continue
        if name == "COURSES_BASE_DIR" and os.environ.get("INTERNAL_COURSES_DIR"):
            continue

        if required_in_dev or not in_dev:
            if name == "DATABASE_URL":
                errors.append(f"  ✗ {name}: Not set ({description})")
            else:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    return not errors, errors + warnings
