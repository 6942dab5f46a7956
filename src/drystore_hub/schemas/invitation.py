"""Invitation and remote-function schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from drystore_hub.models import InvitationStatus


class SendInvitationRequest(BaseModel):
    email: EmailStr
    message: str | None = Field(None, max_length=1000)


class SendInvitationResponse(BaseModel):
    success: bool = True
    invitation_id: str
    invite_url: str


class InvitationResponse(BaseModel):
    id: str
    email: str
    status: InvitationStatus
    invited_by: str
    inviter_name: str
    message: str | None
    expires_at: datetime
    accepted_at: datetime | None
    created_at: datetime


class InvitationValidationResponse(BaseModel):
    """What the public acceptance page needs to render."""

    email: str
    inviter_name: str
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AcceptInvitationRequest(BaseModel):
    password: str
    confirm_password: str
    display_name: str | None = Field(None, min_length=1, max_length=100)


class AcceptInvitationResponse(BaseModel):
    user_id: str
    email: str
    access_token: str
    token_type: str = "bearer"


class ExportRequest(BaseModel):
    channel_id: str
    start_date: datetime | None = None
    end_date: datetime | None = None
    format: Literal["json", "csv"] = "json"
