# tests/services/test_read_tracking.py
"""Tests for the scroll-then-confirm document read gate."""

from __future__ import annotations

import pytest

from drystore_hub.services import documents as document_service
from drystore_hub.services import read_tracking
from drystore_hub.services.read_tracking import ReadConfirmationGate, ReadGateError, ReadState


def test_gate_requires_scroll_before_confirmation() -> None:
    gate = ReadConfirmationGate()
    with pytest.raises(ReadGateError):
        gate.set_checked(True)
    assert gate.state is ReadState.UNREAD


def test_scroll_within_tolerance_unlocks_gate() -> None:
    gate = ReadConfirmationGate()
    assert gate.record_scroll(position=500, viewport=400, height=1000) is True
    assert gate.set_checked(True) is True
    assert gate.state is ReadState.CONFIRMED


def test_scroll_short_of_end_keeps_gate_locked() -> None:
    gate = ReadConfirmationGate()
    assert gate.record_scroll(position=100, viewport=400, height=1000) is False


def test_unchecking_confirmation_is_ignored() -> None:
    gate = ReadConfirmationGate(scrolled=True, confirmed=True)
    assert gate.set_checked(False) is True
    assert gate.checked


SCROLL_SHORT = ("scroll", 100)
SCROLL_END = ("scroll", 600)
CHECK = ("check", True)
UNCHECK = ("check", False)


@pytest.mark.parametrize(
    "steps",
    [
        [CHECK, SCROLL_SHORT, CHECK, UNCHECK, SCROLL_END, UNCHECK, CHECK, SCROLL_SHORT, UNCHECK],
        [SCROLL_SHORT, SCROLL_SHORT, CHECK, CHECK, SCROLL_END, SCROLL_SHORT, CHECK, CHECK],
        [UNCHECK, CHECK, UNCHECK, SCROLL_END, CHECK, UNCHECK, SCROLL_SHORT],
        [("scroll", 499), CHECK, ("scroll", 500), UNCHECK, ("scroll", 50), ("scroll", 0), CHECK, UNCHECK],
        [SCROLL_END, ("scroll", 499), ("scroll", 120), CHECK, SCROLL_SHORT, UNCHECK, ("scroll", 900)],
    ],
)
def test_gate_never_checked_without_scroll(steps) -> None:
    gate = ReadConfirmationGate()
    was_scrolled = was_checked = False
    for action, value in steps:
        if action == "scroll":
            gate.record_scroll(position=value, viewport=400, height=1000)
        else:
            try:
                gate.set_checked(value)
            except ReadGateError:
                assert not gate.scrolled
        assert not (gate.checked and not gate.scrolled)
        assert gate.scrolled or not was_scrolled
        assert gate.checked or not was_checked
        was_scrolled, was_checked = gate.scrolled, gate.checked
    assert gate.state is ReadState.CONFIRMED


@pytest.fixture()
def document(db_session, admin_user):
    return document_service.create_document(db_session, admin_user, {"title": "Manual"})


def test_confirm_before_scroll_is_rejected(db_session, test_user, document) -> None:
    with pytest.raises(ReadGateError):
        read_tracking.confirm_document_read(db_session, test_user.id, document.id)
    assert read_tracking.get_document_read_status(db_session, test_user.id, document.id).is_confirmed is False


def test_scroll_then_confirm(db_session, test_user, document) -> None:
    read_tracking.record_scroll_complete(db_session, test_user.id, document.id)
    read_tracking.confirm_document_read(db_session, test_user.id, document.id)

    status = read_tracking.get_document_read_status(db_session, test_user.id, document.id)
    assert status.is_read and status.scrolled_to_end and status.is_confirmed
    assert status.confirmed_at is not None


def test_announcement_read_is_idempotent(db_session, test_user, admin_user) -> None:
    from drystore_hub.services import announcements as announcement_service

    announcement = announcement_service.create_announcement(db_session, admin_user, {"title": "Aviso"})
    first = read_tracking.mark_announcement_read(db_session, test_user.id, announcement.id)
    second = read_tracking.mark_announcement_read(db_session, test_user.id, announcement.id)
    assert first.id == second.id
