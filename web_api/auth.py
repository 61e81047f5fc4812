"""
Active-profile checks for route handlers.

There is no login in the security sense: the library is a single-operator
app and "logged in" means a profile has been selected. Handlers depend on
these helpers instead of reading the SessionStore directly.
"""

from uuid import UUID

from fastapi import Depends, HTTPException, Query

from core.sessions import SessionStore
from web_api.dependencies import get_session_store


def get_optional_user_id(
    session_store: SessionStore = Depends(get_session_store),
) -> UUID | None:
    """Profile ID of the active session, or None."""
    return session_store.current_user_id


def require_active_profile(
    session_store: SessionStore = Depends(get_session_store),
) -> UUID:
    """
    Profile ID of the active session.

    Raises:
        HTTPException: 401 if no profile is selected
    """
    user_id = session_store.current_user_id
    if user_id is None:
        raise HTTPException(401, "You must select a profile first")
    return user_id


def resolve_user_id(
    user_id: UUID | None = Query(None),
    session_user_id: UUID | None = Depends(get_optional_user_id),
) -> UUID:
    """
    User whose progress a request is about.

    An explicit user_id query parameter wins; otherwise the active profile.

    Raises:
        HTTPException: 400 if neither is available
    """
    resolved = user_id or session_user_id
    if resolved is None:
        raise HTTPException(400, "user_id is required when no profile is selected")
    return resolved
