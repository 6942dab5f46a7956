"""Channel-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from drystore_hub.models import MemberRole


class ChannelCreate(BaseModel):
    """Schema for creating a new channel."""

    name: str = Field(..., min_length=1, max_length=80)
    description: str | None = None
    is_private: bool = False


class ChannelResponse(BaseModel):
    """Schema for channel information returned by the API."""

    id: str
    name: str
    description: str | None
    is_private: bool
    created_by: str
    created_at: datetime
    updated_at: datetime
    is_member: bool = False

    model_config = ConfigDict(from_attributes=True)


class ChannelMemberResponse(BaseModel):
    """Channel member with the profile fields used by the mention popup."""

    user_id: str
    role: MemberRole
    joined_at: datetime
    display_name: str | None = None
    avatar_url: str | None = None


class MemberAddRequest(BaseModel):
    user_id: str
    role: MemberRole = MemberRole.MEMBER


class MembershipResponse(BaseModel):
    channel_id: str
    is_member: bool
    role: MemberRole | None = None


class MentionSuggestion(BaseModel):
    user_id: str
    label: str
    avatar_url: str | None = None
