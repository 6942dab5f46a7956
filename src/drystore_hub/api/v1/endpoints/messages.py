# src/drystore_hub/api/v1/endpoints/messages.py
"""Channel message and conversation list endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from drystore_hub.models import Message, Profile
from drystore_hub.schemas.message import (
    ConversationResponse,
    MessageAuthor,
    MessageCreate,
    MessageResponse,
    MessageUpdate,
)
from drystore_hub.services import channels as channel_service
from drystore_hub.services import messages as message_service
from drystore_hub.services.conversations import build_conversations, search_conversations

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/messages", tags=["messages"])


def _to_response(message: Message, profile: Profile | None = None) -> MessageResponse:
    response = MessageResponse.model_validate(message)
    response.author = MessageAuthor(
        user_id=message.user_id,
        display_name=profile.display_name if profile else None,
        avatar_url=profile.avatar_url if profile else None,
    )
    return response


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    current_user: CurrentUserDep,
    db: SessionDep,
    q: str | None = Query(None, description="Filter by name or last message"),
) -> list[ConversationResponse]:
    """Return the sidebar conversation list, most recent first."""
    items = search_conversations(build_conversations(db, current_user), q)
    return [ConversationResponse.model_validate(item) for item in items]


@router.get("/channel/{channel_id}", response_model=list[MessageResponse])
async def list_channel_messages(
    channel_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int | None = Query(None, ge=1, le=1000),
) -> list[MessageResponse]:
    """List a channel's messages in ascending creation order."""
    channel = channel_service.get_channel(db, channel_id)
    if channel is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Channel not found")
    if channel.is_private and not channel_service.is_member(db, channel_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this channel",
        )
    rows = message_service.list_channel_messages(db, channel_id, limit=limit)
    return [_to_response(message, profile) for message, profile in rows]


@router.post("/channel/{channel_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    channel_id: str,
    payload: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Post a message to a channel the caller belongs to."""
    if channel_service.get_channel(db, channel_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Channel not found")
    try:
        message = message_service.send_message(
            db,
            current_user,
            channel_id,
            payload.content,
            attachments=[attachment.model_dump(exclude_none=True) for attachment in payload.attachments],
            reply_to_id=payload.reply_to_id,
            mentions=[mention.model_dump() for mention in payload.mentions],
        )
    except message_service.NotChannelMemberError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except message_service.MessageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(message, current_user.profile)


@router.patch("/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: str,
    payload: MessageUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Edit one of the caller's own messages."""
    message = message_service.get_message(db, message_id)
    if message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if message.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only edit your own messages",
        )
    try:
        message = message_service.edit_message(db, current_user, message, payload.content)
    except message_service.MessageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(message, current_user.profile)
