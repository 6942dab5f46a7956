"""Read receipts for announcements and documents.

Documents go through a two-step gate: the reader must reach the end of the
content before the "I have read this" confirmation is accepted. The gate is
modelled by :class:`ReadConfirmationGate` and enforced on the persisted row
by :func:`confirm_document_read`.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from drystore_hub.db.time import utcnow
from drystore_hub.models import AnnouncementRead, DocumentRead

from .change_feed import ChangeType, publish_change

logger = logging.getLogger(__name__)

# Reaching within this many pixels of the bottom counts as the end.
SCROLL_END_TOLERANCE = 100


class ReadGateError(ValueError):
    """Raised when a document is confirmed before it was scrolled to the end."""


class ReadState(enum.StrEnum):
    UNREAD = "unread"
    SCROLLED = "scrolled"
    CONFIRMED = "confirmed"


def reached_end(position: float, viewport: float, height: float) -> bool:
    """Return True when the bottom of the viewport is within tolerance of the end."""
    return position + viewport >= height - SCROLL_END_TOLERANCE


class ReadConfirmationGate:
    """State machine ``unread -> scrolled -> confirmed``.

    The checked flag can only become true once the scroll flag is set, and
    neither flag is ever cleared.
    """

    def __init__(self, *, scrolled: bool = False, confirmed: bool = False) -> None:
        if confirmed and not scrolled:
            raise ReadGateError("A confirmed read must have been scrolled to the end")
        self._scrolled = scrolled
        self._checked = confirmed

    @classmethod
    def from_record(cls, record: DocumentRead | None) -> ReadConfirmationGate:
        if record is None:
            return cls()
        scrolled = record.scrolled_to_end_at is not None or record.confirmed_read
        return cls(scrolled=scrolled, confirmed=record.confirmed_read)

    @property
    def scrolled(self) -> bool:
        return self._scrolled

    @property
    def checked(self) -> bool:
        return self._checked

    @property
    def state(self) -> ReadState:
        if self._checked:
            return ReadState.CONFIRMED
        if self._scrolled:
            return ReadState.SCROLLED
        return ReadState.UNREAD

    def record_scroll(self, position: float, viewport: float, height: float) -> bool:
        """Feed a scroll event; returns the scroll flag afterwards."""
        if not self._scrolled and reached_end(position, viewport, height):
            self._scrolled = True
        return self._scrolled

    def mark_scrolled(self) -> None:
        self._scrolled = True

    def set_checked(self, checked: bool) -> bool:
        """Toggle the confirmation checkbox.

        Raises:
            ReadGateError: When checking before the scroll flag is set.
        """
        if not checked:
            # Confirmation is permanent once given.
            return self._checked
        if not self._scrolled:
            raise ReadGateError("Please read the whole document before confirming")
        self._checked = True
        return self._checked


@dataclass(frozen=True)
class ReadStatus:
    is_read: bool
    read_at: datetime | None = None
    is_confirmed: bool = False
    confirmed_at: datetime | None = None
    scrolled_to_end: bool = False


def mark_announcement_read(db: Session, user_id: str, announcement_id: str) -> AnnouncementRead:
    """Insert the read receipt unless it already exists."""
    record = (
        db.query(AnnouncementRead)
        .filter(
            AnnouncementRead.announcement_id == announcement_id,
            AnnouncementRead.user_id == user_id,
        )
        .first()
    )
    if record is not None:
        return record
    record = AnnouncementRead(announcement_id=announcement_id, user_id=user_id)
    db.add(record)
    db.commit()
    db.refresh(record)
    publish_change("announcement_reads", ChangeType.INSERT, record)
    return record


def get_announcement_read_status(db: Session, user_id: str, announcement_id: str) -> ReadStatus:
    record = (
        db.query(AnnouncementRead)
        .filter(
            AnnouncementRead.announcement_id == announcement_id,
            AnnouncementRead.user_id == user_id,
        )
        .first()
    )
    if record is None:
        return ReadStatus(is_read=False)
    return ReadStatus(is_read=True, read_at=record.read_at)


def _document_read(db: Session, user_id: str, document_id: str) -> DocumentRead | None:
    return (
        db.query(DocumentRead)
        .filter(DocumentRead.document_id == document_id, DocumentRead.user_id == user_id)
        .first()
    )


def _save(db: Session, record: DocumentRead, created: bool) -> DocumentRead:
    db.add(record)
    db.commit()
    db.refresh(record)
    publish_change("document_reads", ChangeType.INSERT if created else ChangeType.UPDATE, record)
    return record


def mark_document_read(
    db: Session,
    user_id: str,
    document_id: str,
    confirmed: bool = False,
) -> DocumentRead:
    """Record that the document was opened, optionally confirming it.

    Confirming goes through the gate, so it fails unless the end of the
    document was reached first.
    """
    record = _document_read(db, user_id, document_id)
    created = record is None
    if record is None:
        record = DocumentRead(document_id=document_id, user_id=user_id, confirmed_read=False)
    if confirmed and not record.confirmed_read:
        ReadConfirmationGate.from_record(record).set_checked(True)
        record.confirmed_read = True
        record.confirmed_at = utcnow()
    elif not created:
        return record
    return _save(db, record, created)


def record_scroll_complete(db: Session, user_id: str, document_id: str) -> DocumentRead:
    """Persist that the reader reached the end of the document."""
    record = _document_read(db, user_id, document_id)
    created = record is None
    if record is None:
        record = DocumentRead(document_id=document_id, user_id=user_id, confirmed_read=False)
    if record.scrolled_to_end_at is not None:
        return record
    record.scrolled_to_end_at = utcnow()
    return _save(db, record, created)


def confirm_document_read(db: Session, user_id: str, document_id: str) -> DocumentRead:
    """Confirm a read; raises :class:`ReadGateError` before scroll-complete."""
    record = _document_read(db, user_id, document_id)
    gate = ReadConfirmationGate.from_record(record)
    if gate.checked and record is not None:
        return record
    gate.set_checked(True)
    return mark_document_read(db, user_id, document_id, confirmed=True)


def get_document_read_status(db: Session, user_id: str, document_id: str) -> ReadStatus:
    record = _document_read(db, user_id, document_id)
    if record is None:
        return ReadStatus(is_read=False)
    return ReadStatus(
        is_read=True,
        read_at=record.read_at,
        is_confirmed=record.confirmed_read,
        confirmed_at=record.confirmed_at,
        scrolled_to_end=record.scrolled_to_end_at is not None,
    )
