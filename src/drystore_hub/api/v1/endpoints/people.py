# src/drystore_hub/api/v1/endpoints/people.py
"""Directory of people and the caller's own settings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from drystore_hub.models import Profile
from drystore_hub.schemas.user import ProfileResponse, SettingsUpdateRequest
from drystore_hub.services import storage as storage_service
from drystore_hub.services import user_service
from drystore_hub.services.storage import StorageError, get_storage

from ..dependencies import CurrentUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["people"])

MAX_AVATAR_BYTES = 5 * 1024 * 1024


@router.get("/people", response_model=list[ProfileResponse])
async def list_people(
    _current_user: CurrentUserDep,
    db: SessionDep,
    q: str | None = Query(None, description="Match name, bio, job title or department"),
) -> list[Profile]:
    """List profiles ordered by display name."""
    return list(user_service.search_people(db, q))


@router.get("/people/{user_id}", response_model=ProfileResponse)
async def get_person(user_id: str, _current_user: CurrentUserDep, db: SessionDep) -> Profile:
    user = user_service.get_user(db, user_id)
    if user is None or user.profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return user.profile


@router.patch("/settings", response_model=ProfileResponse)
async def update_settings(
    payload: SettingsUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Profile:
    """Update the caller's profile and preferences."""
    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    return user_service.update_profile(db, current_user, update_data)


@router.post("/settings/avatar", response_model=ProfileResponse)
async def upload_avatar(
    current_user: CurrentUserDep,
    db: SessionDep,
    file: UploadFile = File(...),
) -> Profile:
    """Replace the caller's avatar and point the profile at it."""
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only images are accepted")
    data = await file.read()
    if len(data) > MAX_AVATAR_BYTES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Avatar must be at most 5MB")

    filename = file.filename or "avatar.png"
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "png"
    path = f"{current_user.id}/{current_user.id}.{extension}"
    storage = get_storage()
    try:
        storage.upload(storage_service.AVATARS, path, data, upsert=True)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("Avatar updated for user %s", current_user.id)
    return user_service.update_profile(
        db, current_user, {"avatar_url": storage.public_url(storage_service.AVATARS, path)}
    )
