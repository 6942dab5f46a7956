"""Recent activity feed and platform totals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from drystore_hub.db.time import as_utc
from drystore_hub.models import Channel, Document, Message, Profile

from .rich_text import extract_text

SOURCE_LIMIT = 10
FEED_LIMIT = 20
DESCRIPTION_LENGTH = 100
UNKNOWN_USER = "Usuário"


@dataclass(frozen=True)
class ActivityItem:
    id: str
    type: str
    title: str
    description: str
    user_name: str
    created_at: datetime


@dataclass(frozen=True)
class ActivityStats:
    total_messages: int
    total_documents: int
    total_channels: int
    active_users: int


def _truncate(text: str) -> str:
    if len(text) > DESCRIPTION_LENGTH:
        return text[:DESCRIPTION_LENGTH] + "..."
    return text


def _names(db: Session, user_ids: set[str]) -> dict[str, str]:
    if not user_ids:
        return {}
    rows = db.query(Profile.user_id, Profile.display_name).filter(Profile.user_id.in_(user_ids))
    return {row.user_id: row.display_name for row in rows if row.display_name}


def recent_activity(db: Session, limit: int = FEED_LIMIT) -> list[ActivityItem]:
    """Merge the latest messages, documents and channels, newest first."""
    messages = db.query(Message).order_by(Message.created_at.desc()).limit(SOURCE_LIMIT).all()
    documents = db.query(Document).order_by(Document.created_at.desc()).limit(SOURCE_LIMIT).all()
    channels = db.query(Channel).order_by(Channel.created_at.desc()).limit(SOURCE_LIMIT).all()
    names = _names(
        db,
        {m.user_id for m in messages} | {d.created_by for d in documents} | {c.created_by for c in channels},
    )

    items = [
        ActivityItem(
            id=f"msg-{message.id}",
            type="message",
            title="Nova mensagem",
            description=_truncate(extract_text(message.content)),
            user_name=names.get(message.user_id, UNKNOWN_USER),
            created_at=as_utc(message.created_at),
        )
        for message in messages
    ]
    items += [
        ActivityItem(
            id=f"doc-{document.id}",
            type="document",
            title="Documento criado",
            description=document.title,
            user_name=names.get(document.created_by, UNKNOWN_USER),
            created_at=as_utc(document.created_at),
        )
        for document in documents
    ]
    items += [
        ActivityItem(
            id=f"channel-{channel.id}",
            type="channel",
            title="Canal criado",
            description=channel.name,
            user_name=names.get(channel.created_by, UNKNOWN_USER),
            created_at=as_utc(channel.created_at),
        )
        for channel in channels
    ]
    items.sort(key=lambda item: item.created_at, reverse=True)
    return items[:limit]


def activity_stats(db: Session) -> ActivityStats:
    return ActivityStats(
        total_messages=db.query(func.count(Message.id)).scalar() or 0,
        total_documents=db.query(func.count(Document.id)).scalar() or 0,
        total_channels=db.query(func.count(Channel.id)).scalar() or 0,
        active_users=db.query(func.count(Profile.id)).scalar() or 0,
    )
