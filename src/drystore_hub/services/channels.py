"""Channel and membership helpers."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from drystore_hub.models import Channel, ChannelMember, MemberRole, Profile, User

from .change_feed import ChangeType, publish_change
from .mentions import MentionCandidate

logger = logging.getLogger(__name__)

__all__ = [
    "ChannelError",
    "list_channels",
    "get_channel",
    "create_channel",
    "is_member",
    "get_membership",
    "add_member",
    "remove_member",
    "list_members",
    "member_ids",
    "joined_channel_ids",
    "mention_candidates",
    "auto_join_public_channels",
]


class ChannelError(ValueError):
    """Raised for invalid channel operations."""


def list_channels(db: Session, user: User) -> list[tuple[Channel, bool]]:
    """Return every channel ordered by name together with the user's membership flag."""
    joined = {
        row.channel_id
        for row in db.query(ChannelMember.channel_id).filter(ChannelMember.user_id == user.id)
    }
    channels = db.query(Channel).order_by(Channel.name).all()
    return [(channel, channel.id in joined) for channel in channels]


def get_channel(db: Session, channel_id: str) -> Channel | None:
    return db.query(Channel).filter(Channel.id == channel_id).first()


def create_channel(
    db: Session,
    creator: User,
    name: str,
    description: str | None = None,
    is_private: bool = False,
) -> Channel:
    """Create a channel and its creator's ``admin`` membership in one transaction."""
    clean_name = name.strip()
    if not clean_name:
        raise ChannelError("Channel name is required")
    if db.query(Channel).filter(Channel.name == clean_name).first():
        raise ChannelError("A channel with this name already exists")

    channel = Channel(
        name=clean_name,
        description=description,
        is_private=is_private,
        created_by=creator.id,
    )
    db.add(channel)
    db.flush()
    db.add(ChannelMember(channel_id=channel.id, user_id=creator.id, role=MemberRole.ADMIN.value))
    db.commit()
    db.refresh(channel)
    publish_change("channels", ChangeType.INSERT, channel)
    logger.info("Channel %s created by %s", channel.name, creator.id)
    return channel


def get_membership(db: Session, channel_id: str, user_id: str) -> ChannelMember | None:
    return (
        db.query(ChannelMember)
        .filter(ChannelMember.channel_id == channel_id, ChannelMember.user_id == user_id)
        .first()
    )


def is_member(db: Session, channel_id: str, user_id: str) -> bool:
    return get_membership(db, channel_id, user_id) is not None


def add_member(
    db: Session,
    channel: Channel,
    user_id: str,
    role: MemberRole = MemberRole.MEMBER,
) -> ChannelMember:
    """Add ``user_id`` to ``channel``; raises if already a member."""
    if is_member(db, channel.id, user_id):
        raise ChannelError("Already a member of this channel")
    membership = ChannelMember(channel_id=channel.id, user_id=user_id, role=role.value)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    publish_change("channel_members", ChangeType.INSERT, membership)
    return membership


def remove_member(db: Session, channel: Channel, user_id: str) -> ChannelMember:
    """Remove ``user_id`` from ``channel``; raises if not a member."""
    membership = get_membership(db, channel.id, user_id)
    if membership is None:
        raise ChannelError("Not a member of this channel")
    db.delete(membership)
    db.commit()
    publish_change("channel_members", ChangeType.DELETE, {"id": membership.id, "channel_id": channel.id, "user_id": user_id})
    return membership


def list_members(db: Session, channel_id: str) -> Sequence[tuple[ChannelMember, Profile | None]]:
    """Return memberships joined with profile data, oldest member first."""
    return (
        db.query(ChannelMember, Profile)
        .outerjoin(Profile, Profile.user_id == ChannelMember.user_id)
        .filter(ChannelMember.channel_id == channel_id)
        .order_by(ChannelMember.joined_at)
        .all()
    )


def member_ids(db: Session, channel_id: str) -> set[str]:
    rows = db.query(ChannelMember.user_id).filter(ChannelMember.channel_id == channel_id)
    return {row.user_id for row in rows}


def joined_channel_ids(db: Session, user_id: str) -> set[str]:
    rows = db.query(ChannelMember.channel_id).filter(ChannelMember.user_id == user_id)
    return {row.channel_id for row in rows}


def mention_candidates(db: Session, channel_id: str) -> list[MentionCandidate]:
    """Return the channel members in the shape the mention suggester expects."""
    return [
        MentionCandidate(
            user_id=membership.user_id,
            display_name=profile.display_name if profile else None,
            avatar_url=profile.avatar_url if profile else None,
        )
        for membership, profile in list_members(db, channel_id)
    ]


def auto_join_public_channels(db: Session, user: User) -> int:
    """Add ``user`` as a member of every public channel they have not joined.

    Returns the number of channels joined. Failures are logged and never
    block the caller.
    """
    joined = {
        row.channel_id
        for row in db.query(ChannelMember.channel_id).filter(ChannelMember.user_id == user.id)
    }
    to_join = [
        channel
        for channel in db.query(Channel).filter(Channel.is_private.is_(False)).all()
        if channel.id not in joined
    ]
    if not to_join:
        return 0
    memberships = [
        ChannelMember(channel_id=channel.id, user_id=user.id, role=MemberRole.MEMBER.value)
        for channel in to_join
    ]
    db.add_all(memberships)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error auto-joining channels for user %s: %s", user.id, exc)
        return 0
    for membership in memberships:
        publish_change("channel_members", ChangeType.INSERT, membership)
    logger.info("Auto-joined user %s to %d public channels", user.id, len(memberships))
    return len(memberships)
