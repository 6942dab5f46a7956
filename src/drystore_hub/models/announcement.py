"""SQLAlchemy models for announcements and their read receipts."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from drystore_hub.db.session import Base
from drystore_hub.db.time import utcnow

from ._ids import new_id


class Priority(enum.StrEnum):
    """Announcement priority, most pressing first."""

    URGENT = "urgent"
    IMPORTANT = "important"
    NORMAL = "normal"
    INFO = "info"


DEFAULT_CATEGORY = "Geral"


class Announcement(Base):
    """Company-wide notice authored by an administrator."""

    __tablename__ = "announcements"
    __table_args__ = (
        CheckConstraint(
            "priority IN ('urgent', 'important', 'normal', 'info')",
            name="ck_announcements_priority",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default=Priority.NORMAL.value)
    category: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_CATEGORY)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_user_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    publish_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class AnnouncementRead(Base):
    """Existence of a row means the user has read the announcement."""

    __tablename__ = "announcement_reads"
    __table_args__ = (
        UniqueConstraint("announcement_id", "user_id", name="uq_announcement_reads_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    announcement_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("announcements.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    read_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
