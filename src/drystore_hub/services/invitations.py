"""Invitation lifecycle: create, deliver, resend, cancel, validate and accept.

Status moves ``pending -> sent -> {accepted, expired, cancelled}`` and
``pending -> cancelled``; terminal states never change again. Expiry is
derived from ``expires_at`` when the invitation is read and persisted by the
list and validate paths.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from drystore_hub.core import security
from drystore_hub.core.settings import settings
from drystore_hub.db.time import as_utc, utcnow
from drystore_hub.models import Invitation, InvitationStatus, User
from drystore_hub.models.invitation import TERMINAL_STATUSES

from . import email as email_service
from .change_feed import ChangeType, publish_change
from .channels import auto_join_public_channels
from .user_service import create_user, get_user_by_email

logger = logging.getLogger(__name__)

DEFAULT_INVITER_NAME = "Administrador"

_ALLOWED: dict[InvitationStatus, frozenset[InvitationStatus]] = {
    InvitationStatus.PENDING: frozenset({InvitationStatus.SENT, InvitationStatus.CANCELLED}),
    InvitationStatus.SENT: frozenset(
        {InvitationStatus.ACCEPTED, InvitationStatus.EXPIRED, InvitationStatus.CANCELLED}
    ),
}


class InvitationError(ValueError):
    """Base class for invitation failures."""


class InvalidTransitionError(InvitationError):
    """Raised when a status change would leave the lifecycle graph."""


class DuplicateInvitationError(InvitationError):
    """Raised when the email already has an account or an open invitation."""


class InvitationNotFoundError(InvitationError):
    """Raised for unknown, expired or already used tokens."""


class InvitationDeliveryError(InvitationError):
    """Raised when the invitation email could not be sent."""


@dataclass(frozen=True)
class SentInvitation:
    invitation: Invitation
    invite_url: str


def transition(current: InvitationStatus | str, target: InvitationStatus | str) -> InvitationStatus:
    """Return ``target`` if the move from ``current`` is allowed.

    Raises:
        InvalidTransitionError: For any move out of a terminal state or
            outside the lifecycle graph.
    """
    source = InvitationStatus(current)
    destination = InvitationStatus(target)
    if destination not in _ALLOWED.get(source, frozenset()):
        raise InvalidTransitionError(f"Cannot move invitation from {source} to {destination}")
    return destination


def effective_status(invitation: Invitation, now: datetime | None = None) -> InvitationStatus:
    """Return the status to display, treating overdue open invitations as expired."""
    status = InvitationStatus(invitation.status)
    if status in TERMINAL_STATUSES:
        return status
    moment = now or utcnow()
    if as_utc(invitation.expires_at) <= moment:
        return InvitationStatus.EXPIRED
    return status


def invite_url_for(token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/invite/{token}"


def _set_status(db: Session, invitation: Invitation, target: InvitationStatus) -> None:
    invitation.status = transition(invitation.status, target).value
    if target is InvitationStatus.ACCEPTED:
        invitation.accepted_at = utcnow()
    db.add(invitation)


def _persist_expiry(db: Session, invitation: Invitation, now: datetime) -> bool:
    if InvitationStatus(invitation.status) is InvitationStatus.PENDING:
        # Never delivered; there is no pending -> expired edge.
        return False
    if effective_status(invitation, now) is InvitationStatus.EXPIRED and invitation.status != InvitationStatus.EXPIRED:
        _set_status(db, invitation, InvitationStatus.EXPIRED)
        return True
    return False


def inviter_name(db: Session, invitation: Invitation) -> str:
    inviter = db.get(User, invitation.invited_by)
    return (inviter.display_name if inviter else None) or DEFAULT_INVITER_NAME


def list_invitations(db: Session) -> list[Invitation]:
    """Return all invitations newest first, persisting overdue expiries."""
    invitations = db.query(Invitation).order_by(Invitation.created_at.desc()).all()
    now = utcnow()
    changed = [inv for inv in invitations if _persist_expiry(db, inv, now)]
    if changed:
        db.commit()
        for invitation in changed:
            publish_change("invitations", ChangeType.UPDATE, invitation)
    return invitations


def get_invitation(db: Session, invitation_id: str) -> Invitation | None:
    return db.query(Invitation).filter(Invitation.id == invitation_id).first()


def _deliver(db: Session, invitation: Invitation, message: str | None) -> str:
    url = invite_url_for(invitation.token)
    html_body, text = email_service.render_invitation_email(
        inviter_name=inviter_name(db, invitation),
        invite_url=url,
        message=message,
    )
    email_service.send_email(
        to_address=invitation.email,
        subject=email_service.INVITATION_SUBJECT,
        html_body=html_body,
        text=text,
    )
    return url


def send_invitation(db: Session, inviter: User, email: str, message: str | None = None) -> SentInvitation:
    """Create an invitation for ``email`` and deliver it.

    The row is created ``pending`` and removed again if delivery fails, so a
    failed send leaves nothing behind.
    """
    address = email.strip().lower()
    if get_user_by_email(db, address) is not None:
        raise DuplicateInvitationError("A user with this email already exists")
    open_statuses = [InvitationStatus.PENDING.value, InvitationStatus.SENT.value]
    existing = (
        db.query(Invitation)
        .filter(Invitation.email == address, Invitation.status.in_(open_statuses))
        .first()
    )
    if existing is not None:
        if effective_status(existing) is not InvitationStatus.EXPIRED:
            raise DuplicateInvitationError("An invitation has already been sent to this email")
        _persist_expiry(db, existing, utcnow())

    invitation = Invitation(
        email=address,
        token=security.generate_token(),
        invited_by=inviter.id,
        status=InvitationStatus.PENDING.value,
        message=message,
        expires_at=utcnow() + timedelta(days=settings.invitation_expiry_days),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    try:
        url = _deliver(db, invitation, message)
    except email_service.EmailSendError as exc:
        logger.error("Failed to send invitation %s to %s: %s", invitation.id, address, exc)
        db.delete(invitation)
        db.commit()
        raise InvitationDeliveryError("Failed to send invitation email") from exc

    _set_status(db, invitation, InvitationStatus.SENT)
    db.commit()
    db.refresh(invitation)
    publish_change("invitations", ChangeType.INSERT, invitation)
    logger.info("Invitation %s sent to %s", invitation.id, address)
    return SentInvitation(invitation=invitation, invite_url=url)


def resend_invitation(db: Session, invitation: Invitation) -> SentInvitation:
    """Re-dispatch the email for an open invitation."""
    status = effective_status(invitation)
    if status in TERMINAL_STATUSES:
        raise InvalidTransitionError(f"Cannot resend an invitation that is {status}")
    try:
        url = _deliver(db, invitation, invitation.message)
    except email_service.EmailSendError as exc:
        logger.error("Failed to resend invitation %s: %s", invitation.id, exc)
        raise InvitationDeliveryError("Failed to send invitation email") from exc
    if InvitationStatus(invitation.status) is InvitationStatus.PENDING:
        _set_status(db, invitation, InvitationStatus.SENT)
        db.commit()
        db.refresh(invitation)
        publish_change("invitations", ChangeType.UPDATE, invitation)
    return SentInvitation(invitation=invitation, invite_url=url)


def cancel_invitation(db: Session, invitation: Invitation) -> Invitation:
    """Move an open invitation to ``cancelled``."""
    status = effective_status(invitation)
    if status in TERMINAL_STATUSES:
        raise InvalidTransitionError(f"Cannot cancel an invitation that is {status}")
    _set_status(db, invitation, InvitationStatus.CANCELLED)
    db.commit()
    db.refresh(invitation)
    publish_change("invitations", ChangeType.UPDATE, invitation)
    return invitation


def validate_token(db: Session, token: str) -> Invitation:
    """Return the open invitation for ``token``.

    Raises:
        InvitationNotFoundError: If the token is unknown, used, cancelled or
            past its expiry (the expiry is persisted on the way out).
    """
    invitation = db.query(Invitation).filter(Invitation.token == token).first()
    if invitation is None:
        raise InvitationNotFoundError("Invitation not found")
    if _persist_expiry(db, invitation, utcnow()):
        db.commit()
        publish_change("invitations", ChangeType.UPDATE, invitation)
    if effective_status(invitation) is not InvitationStatus.SENT:
        raise InvitationNotFoundError("Invitation is no longer valid")
    return invitation


def accept_invitation(
    db: Session,
    token: str,
    *,
    password: str,
    confirm_password: str,
    display_name: str | None = None,
) -> User:
    """Create the account for an invitation and mark it accepted."""
    if password != confirm_password:
        raise InvitationError("Passwords do not match")
    if len(password) < settings.password_min_length:
        raise InvitationError(
            f"Password must be at least {settings.password_min_length} characters long"
        )
    invitation = validate_token(db, token)
    if get_user_by_email(db, invitation.email) is not None:
        raise DuplicateInvitationError("A user with this email already exists")

    user = create_user(
        db,
        email=invitation.email,
        password=password,
        display_name=display_name or invitation.email.split("@", 1)[0],
        commit=False,
    )
    _set_status(db, invitation, InvitationStatus.ACCEPTED)
    db.commit()
    db.refresh(user)
    publish_change("invitations", ChangeType.UPDATE, invitation)

    auto_join_public_channels(db, user)
    logger.info("Invitation %s accepted by user %s", invitation.id, user.id)
    return user
