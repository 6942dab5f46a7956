"""Schemas for notification badges, pending tasks, metrics and activity."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationCountsResponse(BaseModel):
    total_messages: int
    announcements: int
    mentions: int
    documents: int

    model_config = ConfigDict(from_attributes=True)


class PendingTaskResponse(BaseModel):
    id: str
    type: str
    title: str
    description: str
    priority: str
    created_at: datetime
    resource_id: str

    model_config = ConfigDict(from_attributes=True)


class PendingTasksResponse(BaseModel):
    tasks: list[PendingTaskResponse]
    by_priority: dict[str, list[PendingTaskResponse]]
    total_count: int
    urgent_count: int


class MetricsResponse(BaseModel):
    unread_announcements: int
    unread_documents: int
    pending_tasks: int
    activity_today: int
    is_admin: bool = False
    total_users: int | None = None
    total_messages: int | None = None
    documents_created: int | None = None
    engagement_rate: int | None = None


class ActivityItemResponse(BaseModel):
    id: str
    type: str
    title: str
    description: str
    user_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityStatsResponse(BaseModel):
    total_messages: int
    total_documents: int
    total_channels: int
    active_users: int

    model_config = ConfigDict(from_attributes=True)
