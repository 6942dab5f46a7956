# src/drystore_hub/api/v1/endpoints/announcements.py
"""Announcement endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from drystore_hub.models import Announcement, Profile
from drystore_hub.schemas.content import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
    ImageUploadResponse,
    ReadStatusResponse,
)
from drystore_hub.services import announcements as announcement_service
from drystore_hub.services import read_tracking
from drystore_hub.services.storage import StorageError

from ..dependencies import AdminUserDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/announcements", tags=["announcements"])


def _to_response(announcement: Announcement, author: Profile | None = None) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        preview=announcement_service.preview(announcement.content),
        priority=announcement.priority,
        category=announcement.category,
        is_pinned=announcement.is_pinned,
        image_url=announcement.image_url,
        publish_date=announcement.publish_date,
        created_at=announcement.created_at,
        author_user_id=announcement.author_user_id,
        author_name=author.display_name if author else None,
        author_avatar_url=author.avatar_url if author else None,
    )


def _get_or_404(db: SessionDep, announcement_id: str) -> Announcement:
    announcement = announcement_service.get_announcement(db, announcement_id)
    if announcement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return announcement


@router.get("/", response_model=list[AnnouncementResponse])
async def list_announcements(
    _current_user: CurrentUserDep,
    db: SessionDep,
    category: str | None = Query(None),
    priority: str | None = Query(None, pattern="^(urgent|important|normal|info)$"),
    search: str | None = Query(None),
) -> list[AnnouncementResponse]:
    """Pinned announcements first, then newest publish date first."""
    rows = announcement_service.list_announcements(db, category=category, priority=priority, search=search)
    return [_to_response(announcement, profile) for announcement, profile in rows]


@router.post("/", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    payload: AnnouncementCreate,
    admin_user: AdminUserDep,
    db: SessionDep,
) -> AnnouncementResponse:
    try:
        announcement = announcement_service.create_announcement(db, admin_user, payload.model_dump())
    except announcement_service.AnnouncementError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(announcement, admin_user.profile)


@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(admin_user: AdminUserDep, file: UploadFile = File(...)) -> ImageUploadResponse:
    """Store an announcement image in the public bucket."""
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only images are accepted")
    data = await file.read()
    try:
        url = announcement_service.upload_image(admin_user, file.filename or "image", data)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ImageUploadResponse(url=url)


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(announcement_id: str, _current_user: CurrentUserDep, db: SessionDep) -> AnnouncementResponse:
    announcement = _get_or_404(db, announcement_id)
    author = db.query(Profile).filter(Profile.user_id == announcement.author_user_id).first()
    return _to_response(announcement, author)


@router.patch("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: str,
    payload: AnnouncementUpdate,
    _admin_user: AdminUserDep,
    db: SessionDep,
) -> AnnouncementResponse:
    announcement = _get_or_404(db, announcement_id)
    announcement = announcement_service.update_announcement(
        db, announcement, payload.model_dump(exclude_unset=True)
    )
    author = db.query(Profile).filter(Profile.user_id == announcement.author_user_id).first()
    return _to_response(announcement, author)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(announcement_id: str, _admin_user: AdminUserDep, db: SessionDep) -> None:
    announcement_service.delete_announcement(db, _get_or_404(db, announcement_id))


@router.post("/{announcement_id}/read", response_model=ReadStatusResponse)
async def mark_read(announcement_id: str, current_user: CurrentUserDep, db: SessionDep) -> ReadStatusResponse:
    """Record a read; repeated calls keep the first timestamp."""
    _get_or_404(db, announcement_id)
    read_tracking.mark_announcement_read(db, current_user.id, announcement_id)
    status_ = read_tracking.get_announcement_read_status(db, current_user.id, announcement_id)
    return ReadStatusResponse(**asdict(status_))


@router.get("/{announcement_id}/read-status", response_model=ReadStatusResponse)
async def read_status(announcement_id: str, current_user: CurrentUserDep, db: SessionDep) -> ReadStatusResponse:
    _get_or_404(db, announcement_id)
    status_ = read_tracking.get_announcement_read_status(db, current_user.id, announcement_id)
    return ReadStatusResponse(**asdict(status_))
