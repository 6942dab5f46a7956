# src/drystore_hub/api/v1/endpoints/notifications.py
"""Badge counts, pending tasks and dashboard metrics."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from drystore_hub.schemas.dashboard import (
    MetricsResponse,
    NotificationCountsResponse,
    PendingTaskResponse,
    PendingTasksResponse,
)
from drystore_hub.services import notifications as notification_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/counts", response_model=NotificationCountsResponse)
async def get_counts(current_user: CurrentUserDep, db: SessionDep) -> NotificationCountsResponse:
    """Return sidebar badge counts."""
    counts = notification_service.notification_counts(db, current_user)
    return NotificationCountsResponse.model_validate(counts)


@router.get("/pending-tasks", response_model=PendingTasksResponse)
async def get_pending_tasks(current_user: CurrentUserDep, db: SessionDep) -> PendingTasksResponse:
    """Return unread announcements and unconfirmed documents."""
    pending = notification_service.pending_tasks(db, current_user)
    return PendingTasksResponse(
        tasks=[PendingTaskResponse.model_validate(task) for task in pending.tasks],
        by_priority={
            priority: [PendingTaskResponse.model_validate(task) for task in tasks]
            for priority, tasks in pending.by_priority().items()
        },
        total_count=pending.total_count,
        urgent_count=pending.urgent_count,
    )


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(current_user: CurrentUserDep, db: SessionDep) -> MetricsResponse:
    """Return personal metrics, plus global figures for administrators."""
    metrics = notification_service.personal_metrics(db, current_user)
    return MetricsResponse(**asdict(metrics), is_admin=current_user.is_admin)
