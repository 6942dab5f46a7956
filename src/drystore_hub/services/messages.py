"""Channel messaging: send, edit, list and attachment placement."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from drystore_hub.models import Message, MessageMention, Profile, User
from drystore_hub.models.message import CONTENT_TYPE_RICH, CONTENT_TYPE_TEXT

from . import storage as storage_service
from .change_feed import ChangeType, publish_change
from .channels import is_member, mention_candidates
from .mentions import collect_mentions
from .rich_text import is_rich_content, serialize_content

logger = logging.getLogger(__name__)

TEMP_PREFIX = "temp"


class MessageError(ValueError):
    """Raised when a message cannot be sent or edited."""


class NotChannelMemberError(MessageError):
    """Raised when a non-member tries to post to a channel."""


def list_channel_messages(
    db: Session,
    channel_id: str,
    limit: int | None = None,
) -> Sequence[tuple[Message, Profile | None]]:
    """Return messages oldest first, each with its author's profile."""
    query = (
        db.query(Message, Profile)
        .outerjoin(Profile, Profile.user_id == Message.user_id)
        .filter(Message.channel_id == channel_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def get_message(db: Session, message_id: str) -> Message | None:
    return db.query(Message).filter(Message.id == message_id).first()


def _merge_mentions(
    derived: list[dict[str, Any]],
    supplied: list[dict[str, Any]] | None,
    allowed: set[str],
) -> list[dict[str, Any]]:
    merged = list(derived)
    seen = {entry["user_id"] for entry in derived}
    for entry in supplied or []:
        user_id = str(entry.get("user_id") or "")
        if user_id and user_id in allowed and user_id not in seen:
            seen.add(user_id)
            merged.append({"user_id": user_id, "display_name": entry.get("display_name") or "User"})
    return merged


def _sync_mention_index(db: Session, message: Message) -> None:
    wanted = {entry["user_id"] for entry in message.mentions}
    existing = {
        row.user_id: row
        for row in db.query(MessageMention).filter(MessageMention.message_id == message.id)
    }
    for user_id, row in existing.items():
        if user_id not in wanted:
            db.delete(row)
    for user_id in wanted - existing.keys():
        db.add(MessageMention(message_id=message.id, user_id=user_id))


def _place_attachments(message: Message) -> list[dict[str, Any]]:
    """Move uploads from the staging folder into the message's folder."""
    storage = storage_service.get_storage()
    placed: list[dict[str, Any]] = []
    for attachment in message.attachments:
        attachment_id = str(attachment.get("id") or "")
        if not attachment_id:
            placed.append(attachment)
            continue
        destination = f"{message.id}/{attachment_id}"
        try:
            storage.move(
                storage_service.MESSAGE_ATTACHMENTS,
                f"{TEMP_PREFIX}/{attachment_id}",
                destination,
            )
        except storage_service.StorageError as exc:
            logger.warning("Could not move attachment %s for message %s: %s", attachment_id, message.id, exc)
            placed.append(attachment)
            continue
        placed.append({**attachment, "path": destination})
    return placed


def send_message(
    db: Session,
    author: User,
    channel_id: str,
    content: Any,
    *,
    attachments: list[dict[str, Any]] | None = None,
    reply_to_id: str | None = None,
    mentions: list[dict[str, Any]] | None = None,
) -> Message:
    """Post a message to a channel.

    The stored mention list is re-derived from the content; supplied
    mentions are kept only for channel members.
    """
    body = serialize_content(content)
    if not body and not attachments:
        raise MessageError("Message content or attachments are required")
    if not is_member(db, channel_id, author.id):
        raise NotChannelMemberError("You must be a member of this channel to post")
    if reply_to_id is not None:
        parent = get_message(db, reply_to_id)
        if parent is None or parent.channel_id != channel_id:
            raise MessageError("Reply target must be a message in the same channel")

    members = mention_candidates(db, channel_id)
    derived = collect_mentions(body, members)
    message = Message(
        content=body,
        content_type=CONTENT_TYPE_RICH if is_rich_content(body) else CONTENT_TYPE_TEXT,
        user_id=author.id,
        channel_id=channel_id,
        reply_to_id=reply_to_id,
        attachments=list(attachments or []),
        mentions=_merge_mentions(derived, mentions, {member.user_id for member in members}),
    )
    db.add(message)
    db.flush()
    _sync_mention_index(db, message)
    db.commit()
    db.refresh(message)

    if message.attachments:
        message.attachments = _place_attachments(message)
        db.add(message)
        db.commit()
        db.refresh(message)

    publish_change("messages", ChangeType.INSERT, message)
    return message


def edit_message(db: Session, editor: User, message: Message, content: Any) -> Message:
    """Replace the content of the editor's own message."""
    if message.user_id != editor.id:
        raise MessageError("You can only edit your own messages")
    body = serialize_content(content)
    if not body:
        raise MessageError("Message content is required")

    message.content = body
    message.content_type = CONTENT_TYPE_RICH if is_rich_content(body) else CONTENT_TYPE_TEXT
    message.mentions = collect_mentions(body, mention_candidates(db, message.channel_id))
    message.edited = True
    db.add(message)
    _sync_mention_index(db, message)
    db.commit()
    db.refresh(message)
    publish_change("messages", ChangeType.UPDATE, message)
    return message
