# src/drystore_hub/api/v1/endpoints/auth.py
"""Authentication endpoints for the DryStore Hub API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from drystore_hub.core.security import create_access_token
from drystore_hub.schemas.user import CurrentUserResponse, LoginRequest, LoginResponse
from drystore_hub.services import user_service
from drystore_hub.services.channels import auto_join_public_channels

from ..dependencies import CurrentUserDep, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, db: SessionDep) -> LoginResponse:
    """Exchange email and password for a bearer token.

    Logging in also joins the user to every public channel they are missing.
    """
    user = user_service.authenticate(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    joined = auto_join_public_channels(db, user)
    return LoginResponse(
        access_token=create_access_token(user.id),
        user_id=user.id,
        is_admin=user.is_admin,
        channels_joined=joined,
    )


@router.get("/me", response_model=CurrentUserResponse)
async def read_me(current_user: CurrentUserDep) -> CurrentUserResponse:
    """Return the authenticated user with their profile."""
    return CurrentUserResponse.model_validate(current_user)
