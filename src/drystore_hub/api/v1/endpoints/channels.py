# src/drystore_hub/api/v1/endpoints/channels.py
"""Channel and membership endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from drystore_hub.models import Channel, MemberRole
from drystore_hub.schemas.channel import (
    ChannelCreate,
    ChannelMemberResponse,
    ChannelResponse,
    MemberAddRequest,
    MembershipResponse,
    MentionSuggestion,
)
from drystore_hub.services import channels as channel_service
from drystore_hub.services.mentions import MentionSuggester

from ..dependencies import AdminUserDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/channels", tags=["channels"])


def _get_channel_or_404(db: SessionDep, channel_id: str) -> Channel:
    channel = channel_service.get_channel(db, channel_id)
    if channel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Channel not found",
        )
    return channel


def _ensure_visible(db: SessionDep, channel: Channel, user_id: str) -> None:
    if channel.is_private and not channel_service.is_member(db, channel.id, user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this channel",
        )


def _to_response(channel: Channel, is_member: bool) -> ChannelResponse:
    response = ChannelResponse.model_validate(channel)
    response.is_member = is_member
    return response


@router.get("/", response_model=list[ChannelResponse])
async def list_channels(current_user: CurrentUserDep, db: SessionDep) -> list[ChannelResponse]:
    """List channels ordered by name with the caller's membership flag."""
    return [
        _to_response(channel, member)
        for channel, member in channel_service.list_channels(db, current_user)
        if member or not channel.is_private or current_user.is_admin
    ]


@router.post("/", response_model=ChannelResponse, status_code=status.HTTP_201_CREATED)
async def create_channel(
    channel_data: ChannelCreate,
    current_user: AdminUserDep,
    db: SessionDep,
) -> ChannelResponse:
    """Create a channel; the creator becomes its admin member."""
    try:
        channel = channel_service.create_channel(
            db,
            current_user,
            channel_data.name,
            description=channel_data.description,
            is_private=channel_data.is_private,
        )
    except channel_service.ChannelError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _to_response(channel, True)


@router.get("/{channel_id}", response_model=ChannelResponse)
async def get_channel(channel_id: str, current_user: CurrentUserDep, db: SessionDep) -> ChannelResponse:
    """Get a specific channel by ID."""
    channel = _get_channel_or_404(db, channel_id)
    _ensure_visible(db, channel, current_user.id)
    return _to_response(channel, channel_service.is_member(db, channel.id, current_user.id))


@router.get("/{channel_id}/membership", response_model=MembershipResponse)
async def get_membership(channel_id: str, current_user: CurrentUserDep, db: SessionDep) -> MembershipResponse:
    """Report whether the caller belongs to the channel."""
    _get_channel_or_404(db, channel_id)
    membership = channel_service.get_membership(db, channel_id, current_user.id)
    return MembershipResponse(
        channel_id=channel_id,
        is_member=membership is not None,
        role=membership.role if membership else None,
    )


@router.post("/{channel_id}/join", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
async def join_channel(channel_id: str, current_user: CurrentUserDep, db: SessionDep) -> MembershipResponse:
    """Join a public channel."""
    channel = _get_channel_or_404(db, channel_id)
    if channel.is_private:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Private channels require an invitation from an admin",
        )
    try:
        membership = channel_service.add_member(db, channel, current_user.id)
    except channel_service.ChannelError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return MembershipResponse(channel_id=channel.id, is_member=True, role=membership.role)


@router.post("/{channel_id}/leave", response_model=MembershipResponse)
async def leave_channel(channel_id: str, current_user: CurrentUserDep, db: SessionDep) -> MembershipResponse:
    """Leave a channel."""
    channel = _get_channel_or_404(db, channel_id)
    try:
        channel_service.remove_member(db, channel, current_user.id)
    except channel_service.ChannelError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return MembershipResponse(channel_id=channel.id, is_member=False)


@router.get("/{channel_id}/members", response_model=list[ChannelMemberResponse])
async def list_members(channel_id: str, current_user: CurrentUserDep, db: SessionDep) -> list[ChannelMemberResponse]:
    """List channel members with their display data."""
    channel = _get_channel_or_404(db, channel_id)
    _ensure_visible(db, channel, current_user.id)
    return [
        ChannelMemberResponse(
            user_id=membership.user_id,
            role=MemberRole(membership.role),
            joined_at=membership.joined_at,
            display_name=profile.display_name if profile else None,
            avatar_url=profile.avatar_url if profile else None,
        )
        for membership, profile in channel_service.list_members(db, channel.id)
    ]


@router.get("/{channel_id}/mention-suggestions", response_model=list[MentionSuggestion])
async def mention_suggestions(
    channel_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    q: str = Query("", description="Text typed after '@'"),
) -> list[MentionSuggestion]:
    """Return the members matching ``q`` for the mention popup."""
    channel = _get_channel_or_404(db, channel_id)
    _ensure_visible(db, channel, current_user.id)
    suggester = MentionSuggester(channel_service.mention_candidates(db, channel.id))
    return [
        MentionSuggestion(user_id=member.user_id, label=member.label, avatar_url=member.avatar_url)
        for member in suggester.items(q)
    ]


@router.post("/{channel_id}/members", response_model=ChannelMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    channel_id: str,
    payload: MemberAddRequest,
    _admin: AdminUserDep,
    db: SessionDep,
) -> ChannelMemberResponse:
    """Add a user to a channel (admin only)."""
    channel = _get_channel_or_404(db, channel_id)
    try:
        membership = channel_service.add_member(db, channel, payload.user_id, payload.role)
    except channel_service.ChannelError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return ChannelMemberResponse(
        user_id=membership.user_id,
        role=MemberRole(membership.role),
        joined_at=membership.joined_at,
    )


@router.delete("/{channel_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(channel_id: str, user_id: str, _admin: AdminUserDep, db: SessionDep) -> None:
    """Remove a user from a channel (admin only)."""
    channel = _get_channel_or_404(db, channel_id)
    try:
        channel_service.remove_member(db, channel, user_id)
    except channel_service.ChannelError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
