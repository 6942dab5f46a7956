"""Message, mention and direct-message schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MentionEntry(BaseModel):
    """A user referenced by a message."""

    user_id: str
    display_name: str = "User"


class Attachment(BaseModel):
    """Attachment descriptor stored with a message."""

    id: str
    name: str | None = None
    size: int | None = None
    type: str | None = None
    path: str | None = None

    model_config = ConfigDict(extra="allow")


class MessageCreate(BaseModel):
    """Schema for posting a channel message.

    ``content`` is either plain text or a rich document (object or its JSON
    serialization). ``reply_to_id`` carries the reply target chosen in the
    composer.
    """

    content: str | dict[str, Any] = ""
    attachments: list[Attachment] = Field(default_factory=list)
    reply_to_id: str | None = None
    mentions: list[MentionEntry] = Field(default_factory=list)


class MessageUpdate(BaseModel):
    content: str | dict[str, Any]


class MessageAuthor(BaseModel):
    user_id: str
    display_name: str | None = None
    avatar_url: str | None = None


class MessageResponse(BaseModel):
    """Schema for message data returned by the API."""

    id: str
    content: str
    content_type: str
    user_id: str
    channel_id: str
    reply_to_id: str | None
    attachments: list[dict[str, Any]]
    mentions: list[MentionEntry]
    edited: bool
    created_at: datetime
    updated_at: datetime
    author: MessageAuthor | None = None

    model_config = ConfigDict(from_attributes=True)


class MentionResponse(BaseModel):
    """Row in the current user's mentions inbox."""

    message_id: str
    channel_id: str
    channel_name: str
    author_id: str
    author_name: str | None
    author_avatar_url: str | None
    content: str
    text: str
    created_at: datetime
    is_read: bool

    model_config = ConfigDict(from_attributes=True)


class MarkAllReadResponse(BaseModel):
    marked: int


class DirectMessageCreate(BaseModel):
    """Schema for sending a direct message."""

    recipient_user_id: str
    content: str = Field(..., min_length=1)


class DirectMessageResponse(BaseModel):
    """Schema for direct message data returned by the API."""

    id: str
    sender_user_id: str
    recipient_user_id: str
    content: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationResponse(BaseModel):
    """Sidebar conversation entry."""

    id: str
    name: str
    type: str
    last_message: str
    last_message_time: datetime
    avatar: str
    unread_count: int
    is_online: bool
    is_private: bool
    last_message_user_id: str | None
    last_message_user_name: str | None

    model_config = ConfigDict(from_attributes=True)
