# src/drystore_hub/api/v1/endpoints/admin.py
"""Administrative endpoints: users, roles, job positions and invitations."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from drystore_hub.models import Invitation, JobPosition, User
from drystore_hub.schemas.invitation import InvitationResponse, SendInvitationResponse
from drystore_hub.schemas.user import (
    AdminUserResponse,
    JobAssignmentRequest,
    JobPositionCreate,
    JobPositionResponse,
    JobPositionUpdate,
    RoleUpdateRequest,
)
from drystore_hub.services import invitations as invitation_service
from drystore_hub.services import user_service

from ..dependencies import AdminUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _user_row(user: User) -> AdminUserResponse:
    profile = user.profile
    position = profile.job_position if profile else None
    return AdminUserResponse(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        is_admin=user.is_admin,
        display_name=user.display_name,
        job_position=JobPositionResponse.model_validate(position) if position else None,
    )


def _invitation_row(db: SessionDep, invitation: Invitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        email=invitation.email,
        status=invitation_service.effective_status(invitation),
        invited_by=invitation.invited_by,
        inviter_name=invitation_service.inviter_name(db, invitation),
        message=invitation.message,
        expires_at=invitation.expires_at,
        accepted_at=invitation.accepted_at,
        created_at=invitation.created_at,
    )


def _get_user_or_404(db: SessionDep, user_id: str) -> User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _get_position_or_404(db: SessionDep, position_id: str) -> JobPosition:
    position = db.query(JobPosition).filter(JobPosition.id == position_id).first()
    if position is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job position not found")
    return position


def _get_invitation_or_404(db: SessionDep, invitation_id: str) -> Invitation:
    invitation = invitation_service.get_invitation(db, invitation_id)
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    return invitation


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    _admin_user: AdminUserDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[AdminUserResponse]:
    """List users, newest first."""
    return [_user_row(user) for user in user_service.get_users(db, skip=skip, limit=limit)]


@router.put("/users/{user_id}/role", response_model=AdminUserResponse)
async def update_role(
    user_id: str,
    payload: RoleUpdateRequest,
    admin_user: AdminUserDep,
    db: SessionDep,
) -> AdminUserResponse:
    """Grant or revoke the admin role."""
    user = _get_user_or_404(db, user_id)
    if user.id == admin_user.id and not payload.is_admin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot revoke their own role",
        )
    user = user_service.set_admin(db, user, payload.is_admin)
    logger.info("User %s admin=%s set by %s", user.id, payload.is_admin, admin_user.id)
    return _user_row(user)


@router.put("/users/{user_id}/job-position", response_model=AdminUserResponse)
async def assign_job_position(
    user_id: str,
    payload: JobAssignmentRequest,
    _admin_user: AdminUserDep,
    db: SessionDep,
) -> AdminUserResponse:
    user = _get_user_or_404(db, user_id)
    if payload.job_position_id is not None:
        _get_position_or_404(db, payload.job_position_id)
    user_service.update_profile(db, user, {"job_position_id": payload.job_position_id})
    db.refresh(user)
    return _user_row(user)


@router.get("/job-positions", response_model=list[JobPositionResponse])
async def list_job_positions(_admin_user: AdminUserDep, db: SessionDep) -> list[JobPosition]:
    return list(user_service.get_job_positions(db))


@router.post("/job-positions", response_model=JobPositionResponse, status_code=status.HTTP_201_CREATED)
async def create_job_position(
    payload: JobPositionCreate,
    _admin_user: AdminUserDep,
    db: SessionDep,
) -> JobPosition:
    try:
        return user_service.create_job_position(db, payload.model_dump())
    except user_service.JobPositionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.patch("/job-positions/{position_id}", response_model=JobPositionResponse)
async def update_job_position(
    position_id: str,
    payload: JobPositionUpdate,
    _admin_user: AdminUserDep,
    db: SessionDep,
) -> JobPosition:
    position = _get_position_or_404(db, position_id)
    try:
        return user_service.update_job_position(db, position, payload.model_dump(exclude_unset=True))
    except user_service.JobPositionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/job-positions/{position_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_position(position_id: str, _admin_user: AdminUserDep, db: SessionDep) -> None:
    user_service.delete_job_position(db, _get_position_or_404(db, position_id))


@router.get("/invitations", response_model=list[InvitationResponse])
async def list_invitations(_admin_user: AdminUserDep, db: SessionDep) -> list[InvitationResponse]:
    """List invitations newest first, expiring stale ones on the way."""
    return [_invitation_row(db, invitation) for invitation in invitation_service.list_invitations(db)]


@router.post("/invitations/{invitation_id}/resend", response_model=SendInvitationResponse)
async def resend_invitation(invitation_id: str, _admin_user: AdminUserDep, db: SessionDep) -> SendInvitationResponse:
    invitation = _get_invitation_or_404(db, invitation_id)
    try:
        sent = invitation_service.resend_invitation(db, invitation)
    except invitation_service.InvitationDeliveryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except invitation_service.InvitationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return SendInvitationResponse(invitation_id=sent.invitation.id, invite_url=sent.invite_url)


@router.post("/invitations/{invitation_id}/cancel", response_model=InvitationResponse)
async def cancel_invitation(invitation_id: str, _admin_user: AdminUserDep, db: SessionDep) -> InvitationResponse:
    invitation = _get_invitation_or_404(db, invitation_id)
    try:
        invitation = invitation_service.cancel_invitation(db, invitation)
    except invitation_service.InvitationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return _invitation_row(db, invitation)
