"""User, profile and authentication schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from drystore_hub.models import Theme, UserStatus


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always 'bearer')")
    user_id: str
    is_admin: bool
    channels_joined: int = Field(0, description="Public channels joined on this login")


class JobPositionBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    department: str | None = None
    description: str | None = None


class JobPositionCreate(JobPositionBase):
    """Schema for creating a job position."""


class JobPositionUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    department: str | None = None
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Job position name cannot be null")
        return v


class JobPositionResponse(JobPositionBase):
    id: str

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    """Public profile information."""

    user_id: str
    display_name: str | None
    avatar_url: str | None
    bio: str | None
    status: UserStatus
    theme: Theme
    notifications_enabled: bool
    job_position: JobPositionResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class SettingsUpdateRequest(BaseModel):
    """Partial update of the current user's profile and preferences."""

    display_name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=500)
    status: UserStatus | None = None
    theme: Theme | None = None
    notifications_enabled: bool | None = None
    avatar_url: str | None = None

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = re.sub(r"\s+", " ", v).strip()
        if not v:
            raise ValueError("Display name cannot be blank")
        return v


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    is_admin: bool
    profile: ProfileResponse | None

    model_config = ConfigDict(from_attributes=True)


class AdminUserResponse(BaseModel):
    """Row in the admin users table."""

    id: str
    email: str
    created_at: datetime
    is_admin: bool
    display_name: str | None
    job_position: JobPositionResponse | None = None


class RoleUpdateRequest(BaseModel):
    is_admin: bool


class JobAssignmentRequest(BaseModel):
    job_position_id: str | None = None
