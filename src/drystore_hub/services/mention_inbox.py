"""Per-user view of messages that mention them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from drystore_hub.core.settings import settings
from drystore_hub.models import Channel, MentionRead, Message, MessageMention, Profile

from .change_feed import ChangeType, publish_change
from .rich_text import extract_text


@dataclass(frozen=True)
class MentionItem:
    message_id: str
    channel_id: str
    channel_name: str
    author_id: str
    author_name: str | None
    author_avatar_url: str | None
    content: str
    text: str
    created_at: datetime
    is_read: bool


def list_mentions(db: Session, user_id: str, limit: int | None = None) -> list[MentionItem]:
    """Return messages mentioning ``user_id`` newest first with their read flag."""
    rows = (
        db.query(Message, Channel.name, Profile, MentionRead.id)
        .join(MessageMention, MessageMention.message_id == Message.id)
        .join(Channel, Channel.id == Message.channel_id)
        .outerjoin(Profile, Profile.user_id == Message.user_id)
        .outerjoin(
            MentionRead,
            and_(MentionRead.message_id == Message.id, MentionRead.user_id == user_id),
        )
        .filter(MessageMention.user_id == user_id)
        .order_by(Message.created_at.desc())
        .limit(limit or settings.mentions_page_size)
        .all()
    )
    return [
        MentionItem(
            message_id=message.id,
            channel_id=message.channel_id,
            channel_name=channel_name,
            author_id=message.user_id,
            author_name=profile.display_name if profile else None,
            author_avatar_url=profile.avatar_url if profile else None,
            content=message.content,
            text=extract_text(message.content),
            created_at=message.created_at,
            is_read=read_id is not None,
        )
        for message, channel_name, profile, read_id in rows
    ]


def unread_mention_count(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(MessageMention.id))
        .outerjoin(
            MentionRead,
            and_(
                MentionRead.message_id == MessageMention.message_id,
                MentionRead.user_id == MessageMention.user_id,
            ),
        )
        .filter(MessageMention.user_id == user_id, MentionRead.id.is_(None))
        .scalar()
        or 0
    )


def is_mentioned(db: Session, user_id: str, message_id: str) -> bool:
    return (
        db.query(MessageMention.id)
        .filter(MessageMention.user_id == user_id, MessageMention.message_id == message_id)
        .first()
        is not None
    )


def mark_mention_read(db: Session, user_id: str, message_id: str) -> MentionRead:
    """Acknowledge a single mention; repeated calls return the existing receipt."""
    record = (
        db.query(MentionRead)
        .filter(MentionRead.user_id == user_id, MentionRead.message_id == message_id)
        .first()
    )
    if record is not None:
        return record
    record = MentionRead(user_id=user_id, message_id=message_id)
    db.add(record)
    db.commit()
    db.refresh(record)
    publish_change("mention_reads", ChangeType.INSERT, record)
    return record


def mark_all_mentions_read(db: Session, user_id: str) -> int:
    """Acknowledge every unread mention; returns how many were marked."""
    unread = (
        db.query(MessageMention.message_id)
        .outerjoin(
            MentionRead,
            and_(
                MentionRead.message_id == MessageMention.message_id,
                MentionRead.user_id == MessageMention.user_id,
            ),
        )
        .filter(MessageMention.user_id == user_id, MentionRead.id.is_(None))
        .all()
    )
    records = [MentionRead(user_id=user_id, message_id=row.message_id) for row in unread]
    if not records:
        return 0
    db.add_all(records)
    db.commit()
    for record in records:
        publish_change("mention_reads", ChangeType.INSERT, record)
    return len(records)
