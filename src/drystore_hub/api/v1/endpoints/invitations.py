# src/drystore_hub/api/v1/endpoints/invitations.py
"""Public invitation endpoints used by the signup page."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from drystore_hub.core.security import create_access_token
from drystore_hub.schemas.invitation import (
    AcceptInvitationRequest,
    AcceptInvitationResponse,
    InvitationValidationResponse,
)
from drystore_hub.services import invitations as invitation_service

from ..dependencies import SessionDep

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get("/{token}", response_model=InvitationValidationResponse)
async def validate_invitation(token: str, db: SessionDep) -> InvitationValidationResponse:
    """Check that an invite link is still usable."""
    try:
        invitation = invitation_service.validate_token(db, token)
    except invitation_service.InvitationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return InvitationValidationResponse(
        email=invitation.email,
        inviter_name=invitation_service.inviter_name(db, invitation),
        expires_at=invitation.expires_at,
    )


@router.post("/{token}/accept", response_model=AcceptInvitationResponse, status_code=status.HTTP_201_CREATED)
async def accept_invitation(
    token: str,
    payload: AcceptInvitationRequest,
    db: SessionDep,
) -> AcceptInvitationResponse:
    """Create the account for an invitation and sign the new user in."""
    try:
        user = invitation_service.accept_invitation(
            db,
            token,
            password=payload.password,
            confirm_password=payload.confirm_password,
            display_name=payload.display_name,
        )
    except invitation_service.InvitationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except invitation_service.DuplicateInvitationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except invitation_service.InvitationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AcceptInvitationResponse(
        user_id=user.id,
        email=user.email,
        access_token=create_access_token(user.id),
    )
