"""Sidebar conversation list combining channels and direct-message partners."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from drystore_hub.db.time import as_utc, utcnow
from drystore_hub.models import Channel, ChannelMember, DirectMessage, Message, Profile, User, UserStatus

from .direct_messages import latest_between
from .rich_text import extract_text

NO_MESSAGES = "Nenhuma mensagem"
DIRECT_PLACEHOLDER = "Conversa direta"
UNKNOWN_USER = "Usuário"
DM_PARTNER_LIMIT = 10


@dataclass(frozen=True)
class Conversation:
    id: str
    name: str
    type: str
    last_message: str
    last_message_time: datetime
    avatar: str = ""
    unread_count: int = 0
    is_online: bool = False
    is_private: bool = False
    last_message_user_id: str | None = None
    last_message_user_name: str | None = None


def _channel_conversations(db: Session, user: User, now: datetime) -> list[Conversation]:
    channels = (
        db.query(Channel)
        .join(ChannelMember, ChannelMember.channel_id == Channel.id)
        .filter(ChannelMember.user_id == user.id)
        .all()
    )
    items: list[Conversation] = []
    for channel in channels:
        row = (
            db.query(Message, Profile.display_name)
            .outerjoin(Profile, Profile.user_id == Message.user_id)
            .filter(Message.channel_id == channel.id)
            .order_by(Message.created_at.desc())
            .first()
        )
        if row is None:
            items.append(
                Conversation(
                    id=channel.id,
                    name=channel.name,
                    type="channel",
                    last_message=NO_MESSAGES,
                    last_message_time=now,
                    is_private=channel.is_private,
                )
            )
            continue
        message, author_name = row
        items.append(
            Conversation(
                id=channel.id,
                name=channel.name,
                type="channel",
                last_message=extract_text(message.content) or NO_MESSAGES,
                last_message_time=as_utc(message.created_at),
                is_private=channel.is_private,
                last_message_user_id=message.user_id,
                last_message_user_name=author_name,
            )
        )
    return items


def _direct_conversations(db: Session, user: User, now: datetime) -> list[Conversation]:
    profiles = (
        db.query(Profile)
        .filter(Profile.user_id != user.id)
        .order_by(Profile.display_name)
        .limit(DM_PARTNER_LIMIT)
        .all()
    )
    unread = dict(
        db.query(DirectMessage.sender_user_id, func.count(DirectMessage.id))
        .filter(and_(DirectMessage.recipient_user_id == user.id, DirectMessage.read.is_(False)))
        .group_by(DirectMessage.sender_user_id)
        .all()
    )
    items: list[Conversation] = []
    for profile in profiles:
        latest = latest_between(db, user.id, profile.user_id)
        items.append(
            Conversation(
                id=profile.user_id,
                name=profile.display_name or UNKNOWN_USER,
                type="dm",
                avatar=profile.avatar_url or "",
                last_message=latest.content if latest else DIRECT_PLACEHOLDER,
                last_message_time=as_utc(latest.created_at) if latest else now,
                unread_count=unread.get(profile.user_id, 0),
                is_online=profile.status == UserStatus.ONLINE,
                last_message_user_id=latest.sender_user_id if latest else None,
            )
        )
    return items


def build_conversations(db: Session, user: User, now: datetime | None = None) -> list[Conversation]:
    """Return channel and direct conversations, most recent activity first."""
    moment = now or utcnow()
    items = _channel_conversations(db, user, moment) + _direct_conversations(db, user, moment)
    return sorted(items, key=lambda item: item.last_message_time, reverse=True)


def search_conversations(items: Iterable[Conversation], term: str | None) -> list[Conversation]:
    """Filter by name or last-message text, case-insensitively; empty term keeps all."""
    conversations = list(items)
    if not term:
        return conversations
    needle = term.lower()
    return [
        item
        for item in conversations
        if needle in item.name.lower() or needle in item.last_message.lower()
    ]
