# src/drystore_hub/api/v1/endpoints/functions.py
"""Server-side operations: invitation delivery and conversation export."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Response, status

from drystore_hub.schemas.invitation import ExportRequest, SendInvitationRequest, SendInvitationResponse
from drystore_hub.services import channels as channel_service
from drystore_hub.services import export as export_service
from drystore_hub.services import invitations as invitation_service

from ..dependencies import AdminUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/send-invitation", response_model=SendInvitationResponse)
async def send_invitation(
    payload: SendInvitationRequest,
    admin_user: AdminUserDep,
    db: SessionDep,
) -> SendInvitationResponse:
    """Create an invitation and email the invite link.

    A failed delivery leaves no invitation behind and answers 502.
    """
    try:
        sent = invitation_service.send_invitation(db, admin_user, payload.email, payload.message)
    except invitation_service.InvitationDeliveryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except invitation_service.InvitationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SendInvitationResponse(invitation_id=sent.invitation.id, invite_url=sent.invite_url)


@router.post("/export-conversations")
async def export_conversations(payload: ExportRequest, admin_user: AdminUserDep, db: SessionDep) -> Response:
    """Download a channel's messages as JSON or CSV."""
    channel = channel_service.get_channel(db, payload.channel_id)
    if channel is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Channel not found")

    export = export_service.export_channel(
        db,
        channel.id,
        fmt=payload.format,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    logger.info("User %s exported channel %s as %s", admin_user.id, channel.id, payload.format)
    return Response(
        content=export.body,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
