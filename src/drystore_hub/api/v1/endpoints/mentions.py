# src/drystore_hub/api/v1/endpoints/mentions.py
"""Mentions inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from drystore_hub.schemas.message import MarkAllReadResponse, MentionResponse
from drystore_hub.services import mention_inbox

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/mentions", tags=["mentions"])


@router.get("/", response_model=list[MentionResponse])
async def list_mentions(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int | None = Query(None, ge=1, le=500),
) -> list[MentionResponse]:
    """Messages mentioning the caller, newest first."""
    return [
        MentionResponse.model_validate(item)
        for item in mention_inbox.list_mentions(db, current_user.id, limit=limit)
    ]


@router.get("/unread-count")
async def unread_count(current_user: CurrentUserDep, db: SessionDep) -> dict[str, int]:
    return {"count": mention_inbox.unread_mention_count(db, current_user.id)}


@router.post("/{message_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(message_id: str, current_user: CurrentUserDep, db: SessionDep) -> None:
    """Acknowledge one mention."""
    if not mention_inbox.is_mentioned(db, current_user.id, message_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mention not found")
    mention_inbox.mark_mention_read(db, current_user.id, message_id)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(current_user: CurrentUserDep, db: SessionDep) -> MarkAllReadResponse:
    """Acknowledge every unread mention."""
    return MarkAllReadResponse(marked=mention_inbox.mark_all_mentions_read(db, current_user.id))
