"""Profile management - database operations."""

import logging
from uuid import UUID

from core.database import get_connection, get_transaction
from core.exceptions import ProfileNotFoundError
from core.queries import profiles as profile_queries

logger = logging.getLogger(__name__)


def _require_name(name: str | None, field: str = "name") -> str:
    if not name or not name.strip():
        raise ValueError(f"{field} is required")
    return name.strip()


async def list_profiles() -> list[dict]:
    """Get all profiles, oldest first."""
    async with get_connection() as conn:
        return await profile_queries.list_profiles(conn)


async def create_profile(name: str) -> dict:
    """
    Create a new profile.

    Args:
        name: Display name

    Returns:
        The created profile record

    Raises:
        ValueError: If the name is blank
    """
    name = _require_name(name)
    async with get_transaction() as conn:
        profile = await profile_queries.create_profile(conn, name)
    logger.info(f"Created profile {profile['id']} ({name})")
    return profile


async def get_profile(profile_id: UUID) -> dict:
    """
    Get a profile by ID.

    Raises:
        ProfileNotFoundError: If the profile doesn't exist
    """
    async with get_connection() as conn:
        profile = await profile_queries.get_profile_by_id(conn, profile_id)
    if profile is None:
        raise ProfileNotFoundError(f"Profile not found: {profile_id}")
    return profile


async def rename_profile(current_name: str, new_name: str) -> dict:
    """
    Rename the profile called current_name.

    Raises:
        ValueError: If either name is blank
        ProfileNotFoundError: If no profile has current_name
    """
    current_name = _require_name(current_name, "current name")
    new_name = _require_name(new_name, "new name")

    async with get_transaction() as conn:
        profile = await profile_queries.rename_profile(conn, current_name, new_name)
    if profile is None:
        raise ProfileNotFoundError(f"Profile not found: {current_name}")
    return profile


async def delete_profile(name: str) -> list[UUID]:
    """
    Delete the profile(s) called name.

    Their sessions and progress go with them; courses they imported stay
    but lose their creator.

    Returns:
        IDs of the deleted profiles

    Raises:
        ValueError: If the name is blank
        ProfileNotFoundError: If no profile has that name
    """
    name = _require_name(name)
    async with get_transaction() as conn:
        deleted = await profile_queries.delete_profile_by_name(conn, name)
    if not deleted:
        raise ProfileNotFoundError(f"Profile not found: {name}")
    logger.info(f"Deleted profile(s) {deleted} ({name})")
    return deleted
