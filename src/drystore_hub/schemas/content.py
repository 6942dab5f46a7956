"""Schemas for documents, categories, announcements and read receipts."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drystore_hub.models import Priority


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: dict[str, Any] | None = None
    category: str | None = None
    is_public: bool = True
    tags: list[str] = Field(default_factory=list)


class DocumentUpdate(BaseModel):
    """Partial document save; ``expected_version`` is the version the editor loaded."""

    expected_version: int = Field(..., ge=1)
    title: str | None = Field(None, min_length=1, max_length=200)
    content: dict[str, Any] | None = None
    category: str | None = None
    is_public: bool | None = None
    tags: list[str] | None = None


class DocumentResponse(BaseModel):
    id: str
    title: str
    content: dict[str, Any] | None
    category: str | None
    is_public: bool
    tags: list[str]
    version: int
    created_by: str
    last_modified_by: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttachmentResponse(BaseModel):
    name: str
    path: str
    size: int
    content_type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_in: int


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    description: str | None = None
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=80)
    description: str | None = None
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Category name cannot be null")
        return v


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: str | None
    color: str | None

    model_config = ConfigDict(from_attributes=True)


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: dict[str, Any] | str | None = None
    priority: Priority = Priority.NORMAL
    category: str | None = None
    is_pinned: bool = False
    image_url: str | None = None
    publish_date: datetime | None = None


class AnnouncementUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: dict[str, Any] | str | None = None
    priority: Priority | None = None
    category: str | None = None
    is_pinned: bool | None = None
    image_url: str | None = None


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: dict[str, Any] | None
    preview: str
    priority: Priority
    category: str
    is_pinned: bool
    image_url: str | None
    publish_date: datetime
    created_at: datetime
    author_user_id: str | None
    author_name: str | None = None
    author_avatar_url: str | None = None


class ImageUploadResponse(BaseModel):
    url: str


class ReadStatusResponse(BaseModel):
    is_read: bool
    read_at: datetime | None = None
    is_confirmed: bool = False
    confirmed_at: datetime | None = None
    scrolled_to_end: bool = False

    model_config = ConfigDict(from_attributes=True)


class MarkDocumentReadRequest(BaseModel):
    confirmed: bool = False
