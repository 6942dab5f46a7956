# tests/services/test_invitations.py
"""Tests for the invitation lifecycle."""

from __future__ import annotations

from datetime import timedelta

import pytest

from drystore_hub.db.time import utcnow
from drystore_hub.models import ChannelMember, Invitation, InvitationStatus
from drystore_hub.services import invitations as invitation_service


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (InvitationStatus.PENDING, InvitationStatus.SENT),
        (InvitationStatus.SENT, InvitationStatus.ACCEPTED),
        (InvitationStatus.SENT, InvitationStatus.EXPIRED),
        (InvitationStatus.SENT, InvitationStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current, target) -> None:
    assert invitation_service.transition(current, target) is target


@pytest.mark.parametrize("terminal", [InvitationStatus.ACCEPTED, InvitationStatus.EXPIRED, InvitationStatus.CANCELLED])
def test_terminal_states_never_move(terminal) -> None:
    with pytest.raises(invitation_service.InvalidTransitionError):
        invitation_service.transition(terminal, InvitationStatus.SENT)


def test_send_invitation_marks_sent_and_emails_link(db_session, admin_user, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "New.Person@Drystore.com.br", "Bem-vindo")

    assert sent.invitation.status == InvitationStatus.SENT
    assert sent.invitation.email == "new.person@drystore.com.br"
    assert sent.invite_url.endswith(f"/invite/{sent.invitation.token}")
    assert len(sent_emails) == 1
    assert sent.invite_url in sent_emails[0]["html_body"]


def test_failed_delivery_leaves_no_invitation(db_session, admin_user, failing_email) -> None:
    with pytest.raises(invitation_service.InvitationDeliveryError):
        invitation_service.send_invitation(db_session, admin_user, "someone@drystore.com.br")
    assert db_session.query(Invitation).count() == 0


def test_duplicate_open_invitation_rejected(db_session, admin_user, sent_emails) -> None:
    invitation_service.send_invitation(db_session, admin_user, "dup@drystore.com.br")
    with pytest.raises(invitation_service.DuplicateInvitationError):
        invitation_service.send_invitation(db_session, admin_user, "dup@drystore.com.br")


def test_existing_user_cannot_be_invited(db_session, admin_user, test_user, sent_emails) -> None:
    with pytest.raises(invitation_service.DuplicateInvitationError):
        invitation_service.send_invitation(db_session, admin_user, test_user.email)


def test_expired_invitation_is_reported_and_persisted(db_session, admin_user, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "late@drystore.com.br")
    sent.invitation.expires_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    with pytest.raises(invitation_service.InvitationNotFoundError):
        invitation_service.validate_token(db_session, sent.invitation.token)
    db_session.refresh(sent.invitation)
    assert sent.invitation.status == InvitationStatus.EXPIRED


def test_accept_creates_user_and_joins_public_channels(db_session, admin_user, channel, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "joiner@drystore.com.br")

    user = invitation_service.accept_invitation(
        db_session,
        sent.invitation.token,
        password="secret123",
        confirm_password="secret123",
        display_name="Joiner",
    )

    db_session.refresh(sent.invitation)
    assert sent.invitation.status == InvitationStatus.ACCEPTED
    assert sent.invitation.accepted_at is not None
    assert user.display_name == "Joiner"
    assert db_session.query(ChannelMember).filter_by(user_id=user.id, channel_id=channel.id).count() == 1

    with pytest.raises(invitation_service.InvitationNotFoundError):
        invitation_service.validate_token(db_session, sent.invitation.token)


def test_accept_rejects_mismatched_passwords(db_session, admin_user, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "typo@drystore.com.br")
    with pytest.raises(invitation_service.InvitationError):
        invitation_service.accept_invitation(
            db_session, sent.invitation.token, password="secret123", confirm_password="secret124"
        )


def test_cancelled_invitation_cannot_be_resent(db_session, admin_user, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "gone@drystore.com.br")
    invitation_service.cancel_invitation(db_session, sent.invitation)
    with pytest.raises(invitation_service.InvalidTransitionError):
        invitation_service.resend_invitation(db_session, sent.invitation)


def test_overdue_invitation_cannot_be_cancelled(db_session, admin_user, sent_emails) -> None:
    sent = invitation_service.send_invitation(db_session, admin_user, "overdue@drystore.com.br")
    sent.invitation.expires_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    with pytest.raises(invitation_service.InvalidTransitionError):
        invitation_service.cancel_invitation(db_session, sent.invitation)
    assert sent.invitation.status == InvitationStatus.SENT
