"""Direct messages between two users."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from drystore_hub.models import DirectMessage, User

from .change_feed import ChangeType, publish_change


class DirectMessageError(ValueError):
    """Raised for invalid direct message operations."""


def send_direct_message(db: Session, sender: User, recipient_id: str, content: str) -> DirectMessage:
    body = content.strip()
    if not body:
        raise DirectMessageError("Message content is required")
    if recipient_id == sender.id:
        raise DirectMessageError("Cannot send a direct message to yourself")
    message = DirectMessage(sender_user_id=sender.id, recipient_user_id=recipient_id, content=body)
    db.add(message)
    db.commit()
    db.refresh(message)
    publish_change("direct_messages", ChangeType.INSERT, message)
    return message


def inbox(db: Session, user_id: str, skip: int = 0, limit: int = 50) -> Sequence[DirectMessage]:
    return (
        db.query(DirectMessage)
        .filter(DirectMessage.recipient_user_id == user_id)
        .order_by(DirectMessage.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def sent(db: Session, user_id: str, skip: int = 0, limit: int = 50) -> Sequence[DirectMessage]:
    return (
        db.query(DirectMessage)
        .filter(DirectMessage.sender_user_id == user_id)
        .order_by(DirectMessage.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def thread(db: Session, user_id: str, other_id: str, limit: int = 200) -> Sequence[DirectMessage]:
    """Return the conversation between two users, oldest first."""
    return (
        db.query(DirectMessage)
        .filter(
            or_(
                and_(DirectMessage.sender_user_id == user_id, DirectMessage.recipient_user_id == other_id),
                and_(DirectMessage.sender_user_id == other_id, DirectMessage.recipient_user_id == user_id),
            )
        )
        .order_by(DirectMessage.created_at.asc())
        .limit(limit)
        .all()
    )


def latest_between(db: Session, user_id: str, other_id: str) -> DirectMessage | None:
    return (
        db.query(DirectMessage)
        .filter(
            or_(
                and_(DirectMessage.sender_user_id == user_id, DirectMessage.recipient_user_id == other_id),
                and_(DirectMessage.sender_user_id == other_id, DirectMessage.recipient_user_id == user_id),
            )
        )
        .order_by(DirectMessage.created_at.desc())
        .first()
    )


def mark_read(db: Session, reader: User, message: DirectMessage) -> DirectMessage:
    if message.recipient_user_id != reader.id:
        raise DirectMessageError("Only the recipient can mark a message as read")
    if not message.read:
        message.read = True
        db.add(message)
        db.commit()
        db.refresh(message)
        publish_change("direct_messages", ChangeType.UPDATE, message)
    return message
