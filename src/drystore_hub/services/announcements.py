"""Company announcements."""
from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from drystore_hub.db.time import utcnow
from drystore_hub.models import Announcement, Priority, Profile, User
from drystore_hub.models.announcement import DEFAULT_CATEGORY

from . import storage as storage_service
from .change_feed import ChangeType, publish_change
from .rich_text import extract_text, to_document

PREVIEW_LENGTH = 220


class AnnouncementError(ValueError):
    """Raised for invalid announcement input."""


def preview(content: Any) -> str:
    """Return the first characters of the flattened content."""
    return extract_text(content)[:PREVIEW_LENGTH]


def list_announcements(
    db: Session,
    *,
    category: str | None = None,
    priority: str | None = None,
    search: str | None = None,
) -> Sequence[tuple[Announcement, Profile | None]]:
    """Return announcements pinned first, then newest publish date first."""
    query = db.query(Announcement, Profile).outerjoin(
        Profile, Profile.user_id == Announcement.author_user_id
    )
    if category:
        query = query.filter(Announcement.category == category)
    if priority:
        query = query.filter(Announcement.priority == Priority(priority).value)
    rows = query.order_by(Announcement.is_pinned.desc(), Announcement.publish_date.desc()).all()
    if not search:
        return rows
    needle = search.lower()
    return [
        (announcement, profile)
        for announcement, profile in rows
        if needle in announcement.title.lower() or needle in extract_text(announcement.content).lower()
    ]


def get_announcement(db: Session, announcement_id: str) -> Announcement | None:
    return db.query(Announcement).filter(Announcement.id == announcement_id).first()


def create_announcement(db: Session, author: User, data: dict[str, Any]) -> Announcement:
    title = (data.get("title") or "").strip()
    if not title:
        raise AnnouncementError("Announcement title is required")
    content = to_document(data.get("content"))
    announcement = Announcement(
        title=title,
        content=content,
        priority=Priority(data.get("priority") or Priority.NORMAL).value,
        category=data.get("category") or DEFAULT_CATEGORY,
        is_pinned=bool(data.get("is_pinned", False)),
        image_url=data.get("image_url"),
        author_user_id=author.id,
        publish_date=data.get("publish_date") or utcnow(),
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    publish_change("announcements", ChangeType.INSERT, announcement)
    return announcement


def update_announcement(db: Session, announcement: Announcement, data: dict[str, Any]) -> Announcement:
    for key, value in data.items():
        if key == "content":
            value = to_document(value)
        elif key == "priority":
            value = Priority(value).value
        elif key == "category":
            value = value or DEFAULT_CATEGORY
        setattr(announcement, key, value)
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    publish_change("announcements", ChangeType.UPDATE, announcement)
    return announcement


def delete_announcement(db: Session, announcement: Announcement) -> None:
    snapshot = {"id": announcement.id, "title": announcement.title}
    db.delete(announcement)
    db.commit()
    publish_change("announcements", ChangeType.DELETE, snapshot)


def upload_image(author: User, filename: str, data: bytes) -> str:
    """Store an image in the public bucket and return its URL."""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    path = f"user-{author.id}/{int(time.time() * 1000)}.{extension}"
    storage = storage_service.get_storage()
    storage.upload(storage_service.ANNOUNCEMENTS, path, data)
    return storage.public_url(storage_service.ANNOUNCEMENTS, path)
