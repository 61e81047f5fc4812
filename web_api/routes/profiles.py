"""
Profile and session API routes.

Endpoints:
- GET /api/profiles - List profiles
- POST /api/profiles - Create a profile
- PUT /api/profiles - Rename a profile
- DELETE /api/profiles?name= - Delete a profile
- POST /api/profiles/{profile_id}/select - Make a profile the active one
- GET /api/session - Current session state
- POST /api/session/logout - End the active session
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from core import profiles as profile_service
from core.exceptions import ProfileNotFoundError
from core.sessions import SessionStore
from web_api.dependencies import get_session_store

router = APIRouter(prefix="/api/profiles", tags=["profiles"])
session_router = APIRouter(prefix="/api/session", tags=["profiles"])


class CreateProfileRequest(BaseModel):
    name: str


class RenameProfileRequest(BaseModel):
    current_name: str
    new_name: str


@router.get("")
async def list_profiles():
    profiles = await profile_service.list_profiles()
    return {"message": "Profiles retrieved successfully", "data": profiles}


@router.post("", status_code=201)
async def create_profile(body: CreateProfileRequest):
    try:
        profile = await profile_service.create_profile(body.name)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"message": "Profile created successfully", "data": profile}


@router.put("")
async def rename_profile(body: RenameProfileRequest):
    try:
        profile = await profile_service.rename_profile(body.current_name, body.new_name)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except ProfileNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Profile updated successfully", "data": profile}


@router.delete("")
async def delete_profile(
    name: str = Query(...),
    session_store: SessionStore = Depends(get_session_store),
):
    """Delete a profile by name; ends the session if it was the active one."""
    try:
        deleted = await profile_service.delete_profile(name)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except ProfileNotFoundError as e:
        raise HTTPException(404, str(e))

    session_store.forget_profile(deleted)
    return {"message": "Profile deleted successfully", "data": {"deleted_ids": deleted}}


@router.post("/{profile_id}/select")
async def select_profile(
    profile_id: UUID,
    session_store: SessionStore = Depends(get_session_store),
):
    try:
        profile = await session_store.select_profile(profile_id)
    except ProfileNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"message": "Profile selected successfully", "data": profile}


@session_router.get("")
async def get_session(session_store: SessionStore = Depends(get_session_store)):
    user_id = session_store.current_user_id
    data = {"logged_in": user_id is not None, "user_id": user_id, "profile": None}
    if user_id is not None:
        try:
            data["profile"] = await profile_service.get_profile(user_id)
        except ProfileNotFoundError:
            data["profile"] = None
    return {"message": "Session retrieved successfully", "data": data}


@session_router.post("/logout")
async def logout(session_store: SessionStore = Depends(get_session_store)):
    await session_store.logout()
    return {"message": "Logged out successfully", "data": None}
