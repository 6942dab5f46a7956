"""Badge counts, pending reading tasks and dashboard metrics.

Counts are recomputed from scratch on every request; clients refetch after
any change-feed event on :data:`WATCHED_TABLES`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from drystore_hub.core.settings import settings
from drystore_hub.db.time import as_utc, utcnow
from drystore_hub.models import (
    Announcement,
    AnnouncementRead,
    ChannelMember,
    Document,
    DocumentRead,
    Message,
    Priority,
    Profile,
    User,
)

from .mention_inbox import unread_mention_count
from .rich_text import extract_text

WATCHED_TABLES = (
    "messages",
    "announcements",
    "mention_reads",
    "documents",
    "announcement_reads",
    "document_reads",
)

TASK_DESCRIPTION_LENGTH = 100
DOCUMENT_TASK_PRIORITY = Priority.NORMAL.value


@dataclass(frozen=True)
class NotificationCounts:
    total_messages: int = 0
    announcements: int = 0
    mentions: int = 0
    documents: int = 0


@dataclass(frozen=True)
class PendingTask:
    id: str
    type: str
    title: str
    description: str
    priority: str
    created_at: datetime
    resource_id: str


@dataclass
class PendingTasks:
    tasks: list[PendingTask] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.tasks)

    @property
    def urgent_count(self) -> int:
        return sum(1 for task in self.tasks if task.priority == Priority.URGENT)

    def by_priority(self) -> dict[str, list[PendingTask]]:
        """Group tasks into the three dashboard columns."""
        groups: dict[str, list[PendingTask]] = {
            Priority.URGENT.value: [],
            Priority.IMPORTANT.value: [],
            Priority.NORMAL.value: [],
        }
        for task in self.tasks:
            if task.priority in groups:
                groups[task.priority].append(task)
        return groups


def last_read_cutoff(now: datetime | None = None) -> datetime:
    """Return the point after which activity counts as new."""
    return (now or utcnow()) - timedelta(hours=settings.notification_lookback_hours)


def _unread_announcements(db: Session, user_id: str):
    return (
        db.query(Announcement)
        .outerjoin(
            AnnouncementRead,
            and_(
                AnnouncementRead.announcement_id == Announcement.id,
                AnnouncementRead.user_id == user_id,
            ),
        )
        .filter(AnnouncementRead.id.is_(None))
    )


def _unconfirmed_documents(db: Session, user_id: str):
    return (
        db.query(Document)
        .outerjoin(
            DocumentRead,
            and_(
                DocumentRead.document_id == Document.id,
                DocumentRead.user_id == user_id,
                DocumentRead.confirmed_read.is_(True),
            ),
        )
        .filter(Document.is_public.is_(True), DocumentRead.id.is_(None))
    )


def notification_counts(db: Session, user: User, now: datetime | None = None) -> NotificationCounts:
    """Return the sidebar badge counts for ``user``."""
    cutoff = last_read_cutoff(now)
    channel_ids = select(ChannelMember.channel_id).where(ChannelMember.user_id == user.id)
    messages = (
        db.query(func.count(Message.id))
        .filter(Message.channel_id.in_(channel_ids), Message.created_at >= cutoff)
        .scalar()
    )
    announcements = (
        db.query(func.count(Announcement.id)).filter(Announcement.created_at >= cutoff).scalar()
    )
    return NotificationCounts(
        total_messages=messages or 0,
        announcements=announcements or 0,
        mentions=unread_mention_count(db, user.id),
        documents=_unconfirmed_documents(db, user.id).count(),
    )


def pending_tasks(db: Session, user: User) -> PendingTasks:
    """Return unread announcements and unconfirmed public documents, newest first."""
    tasks = [
        PendingTask(
            id=f"announcement-{announcement.id}",
            type="announcement",
            title=announcement.title,
            description=extract_text(announcement.content)[:TASK_DESCRIPTION_LENGTH],
            priority=announcement.priority,
            created_at=announcement.created_at,
            resource_id=announcement.id,
        )
        for announcement in _unread_announcements(db, user.id).all()
    ]
    tasks.extend(
        PendingTask(
            id=f"document-{document.id}",
            type="document",
            title=document.title,
            description=document.category or extract_text(document.content)[:TASK_DESCRIPTION_LENGTH],
            priority=DOCUMENT_TASK_PRIORITY,
            created_at=document.created_at,
            resource_id=document.id,
        )
        for document in _unconfirmed_documents(db, user.id).all()
    )
    tasks.sort(key=lambda task: as_utc(task.created_at), reverse=True)
    return PendingTasks(tasks=tasks)


@dataclass(frozen=True)
class PersonalMetrics:
    unread_announcements: int
    unread_documents: int
    pending_tasks: int
    activity_today: int
    total_users: int | None = None
    total_messages: int | None = None
    documents_created: int | None = None
    engagement_rate: int | None = None


def engagement_rate(reads: int, announcements: int, users: int) -> int:
    """Return read receipts as a percentage of possible reads."""
    if not announcements:
        return 0
    return round(reads / (announcements * (users or 1)) * 100)


def _activity_today(db: Session, user_id: str, now: datetime) -> int:
    start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    messages = (
        db.query(func.count(Message.id))
        .filter(Message.user_id == user_id, Message.created_at >= start)
        .scalar()
    )
    announcement_reads = (
        db.query(func.count(AnnouncementRead.id))
        .filter(AnnouncementRead.user_id == user_id, AnnouncementRead.read_at >= start)
        .scalar()
    )
    document_reads = (
        db.query(func.count(DocumentRead.id))
        .filter(DocumentRead.user_id == user_id, DocumentRead.read_at >= start)
        .scalar()
    )
    return (messages or 0) + (announcement_reads or 0) + (document_reads or 0)


def personal_metrics(db: Session, user: User, now: datetime | None = None) -> PersonalMetrics:
    """Return dashboard metrics; administrators also get global figures."""
    moment = now or utcnow()
    unread_announcements = _unread_announcements(db, user.id).count()
    unread_documents = _unconfirmed_documents(db, user.id).count()
    base = {
        "unread_announcements": unread_announcements,
        "unread_documents": unread_documents,
        "pending_tasks": unread_announcements + unread_documents,
        "activity_today": _activity_today(db, user.id, moment),
    }
    if not user.is_admin:
        return PersonalMetrics(**base)

    total_users = db.query(func.count(Profile.id)).scalar() or 0
    total_announcements = db.query(func.count(Announcement.id)).scalar() or 0
    total_reads = db.query(func.count(AnnouncementRead.id)).scalar() or 0
    return PersonalMetrics(
        **base,
        total_users=total_users,
        total_messages=db.query(func.count(Message.id)).scalar() or 0,
        documents_created=db.query(func.count(Document.id)).scalar() or 0,
        engagement_rate=engagement_rate(total_reads, total_announcements, total_users),
    )
