# src/drystore_hub/api/v1/endpoints/direct_messages.py
"""Direct message endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from drystore_hub.models import DirectMessage
from drystore_hub.schemas.message import DirectMessageCreate, DirectMessageResponse
from drystore_hub.services import direct_messages as dm_service
from drystore_hub.services.user_service import get_user

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/direct-messages", tags=["direct-messages"])


@router.post("/", response_model=DirectMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_direct_message(
    payload: DirectMessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> DirectMessage:
    """Send a direct message to another user."""
    if get_user(db, payload.recipient_user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")
    try:
        return dm_service.send_direct_message(db, current_user, payload.recipient_user_id, payload.content)
    except dm_service.DirectMessageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/inbox", response_model=list[DirectMessageResponse])
async def get_inbox(
    current_user: CurrentUserDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> list[DirectMessage]:
    """Messages received by the caller, newest first."""
    return list(dm_service.inbox(db, current_user.id, skip=skip, limit=limit))


@router.get("/sent", response_model=list[DirectMessageResponse])
async def get_sent(
    current_user: CurrentUserDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> list[DirectMessage]:
    """Messages sent by the caller, newest first."""
    return list(dm_service.sent(db, current_user.id, skip=skip, limit=limit))


@router.get("/with/{user_id}", response_model=list[DirectMessageResponse])
async def get_thread(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> list[DirectMessage]:
    """The conversation with another user, oldest first."""
    return list(dm_service.thread(db, current_user.id, user_id))


@router.put("/{message_id}/read", response_model=DirectMessageResponse)
async def mark_read(message_id: str, current_user: CurrentUserDep, db: SessionDep) -> DirectMessage:
    """Mark a received message as read."""
    message = db.query(DirectMessage).filter(DirectMessage.id == message_id).first()
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    try:
        return dm_service.mark_read(db, current_user, message)
    except dm_service.DirectMessageError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
