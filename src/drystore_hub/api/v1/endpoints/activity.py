# src/drystore_hub/api/v1/endpoints/activity.py
"""Recent activity feed."""

from __future__ import annotations

from fastapi import APIRouter, Query

from drystore_hub.schemas.dashboard import ActivityItemResponse, ActivityStatsResponse
from drystore_hub.services import activity as activity_service

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/", response_model=list[ActivityItemResponse])
async def recent_activity(
    _current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(activity_service.FEED_LIMIT, ge=1, le=100),
) -> list[ActivityItemResponse]:
    """Latest messages, documents and channels merged newest first."""
    return [ActivityItemResponse.model_validate(item) for item in activity_service.recent_activity(db, limit=limit)]


@router.get("/stats", response_model=ActivityStatsResponse)
async def activity_stats(_current_user: CurrentUserDep, db: SessionDep) -> ActivityStatsResponse:
    return ActivityStatsResponse.model_validate(activity_service.activity_stats(db))
