"""CRUD-style helpers for users, profiles, roles and job positions."""
from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from drystore_hub.core import security
from drystore_hub.models import JobPosition, Permission, Profile, User, UserRole

from .change_feed import ChangeType, publish_change

logger = logging.getLogger(__name__)

__all__ = [
    "JobPositionError",
    "get_user",
    "get_user_by_email",
    "get_users",
    "create_user",
    "authenticate",
    "set_admin",
    "update_profile",
    "search_people",
    "get_job_positions",
    "create_job_position",
    "update_job_position",
    "delete_job_position",
]


class JobPositionError(ValueError):
    """Raised when a job position name is missing or already taken."""


def get_user(db: Session, user_id: str) -> User | None:
    """Return a single user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Return the user registered with ``email`` (case-insensitive)."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_users(db: Session, skip: int = 0, limit: int = 100) -> Sequence[User]:
    """Return users with their profiles and roles, newest first."""
    return (
        db.query(User)
        .options(joinedload(User.profile).joinedload(Profile.job_position), joinedload(User.roles))
        .order_by(User.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    display_name: str | None = None,
    is_admin: bool = False,
    commit: bool = True,
) -> User:
    """Persist a new user with a profile and a baseline ``user`` role."""
    user = User(email=email.strip().lower(), password_hash=security.hash_password(password))
    user.profile = Profile(display_name=display_name)
    user.roles = [UserRole(permission=Permission.USER.value)]
    if is_admin:
        user.roles.append(UserRole(permission=Permission.ADMIN.value))
    db.add(user)
    if commit:
        db.commit()
        db.refresh(user)
    else:
        db.flush()
    publish_change("profiles", ChangeType.INSERT, user.profile)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the user if the credentials match."""
    user = get_user_by_email(db, email)
    if user is None or not security.verify_password(password, user.password_hash):
        return None
    return user


def set_admin(db: Session, user: User, is_admin: bool) -> User:
    """Grant or revoke the ``admin`` role; idempotent in both directions."""
    existing = next((role for role in user.roles if role.permission == Permission.ADMIN), None)
    if is_admin and existing is None:
        user.roles.append(UserRole(permission=Permission.ADMIN.value))
    elif not is_admin and existing is not None:
        user.roles.remove(existing)
    db.add(user)
    db.commit()
    db.refresh(user)
    publish_change("user_roles", ChangeType.UPDATE, {"user_id": user.id, "is_admin": user.is_admin})
    return user


def update_profile(db: Session, user: User, update_data: dict[str, Any]) -> Profile:
    """Apply partial updates to the user's profile."""
    profile = user.profile
    if profile is None:
        profile = Profile(user_id=user.id)
        user.profile = profile
    for key, value in update_data.items():
        setattr(profile, key, value)

    db.add(profile)
    db.commit()
    db.refresh(profile)
    publish_change("profiles", ChangeType.UPDATE, profile)
    return profile


def search_people(db: Session, term: str | None = None) -> Sequence[Profile]:
    """Return profiles ordered by display name, optionally filtered."""
    query = db.query(Profile).options(joinedload(Profile.job_position)).outerjoin(
        JobPosition, Profile.job_position_id == JobPosition.id
    )
    if term:
        pattern = f"%{term.strip()}%"
        query = query.filter(
            or_(
                Profile.display_name.ilike(pattern),
                Profile.bio.ilike(pattern),
                JobPosition.name.ilike(pattern),
                JobPosition.department.ilike(pattern),
            )
        )
    return query.order_by(Profile.display_name).all()


def get_job_positions(db: Session) -> Sequence[JobPosition]:
    return db.query(JobPosition).order_by(JobPosition.name).all()


def _check_position_name(db: Session, name: Any, exclude_id: str | None = None) -> str:
    name = (name or "").strip()
    if not name:
        raise JobPositionError("Job position name is required")
    query = db.query(JobPosition).filter(JobPosition.name == name)
    if exclude_id is not None:
        query = query.filter(JobPosition.id != exclude_id)
    if query.first():
        raise JobPositionError("Job position already exists")
    return name


def create_job_position(db: Session, data: dict[str, Any]) -> JobPosition:
    data = {**data, "name": _check_position_name(db, data.get("name"))}
    position = JobPosition(**data)
    db.add(position)
    db.commit()
    db.refresh(position)
    return position


def update_job_position(db: Session, position: JobPosition, data: dict[str, Any]) -> JobPosition:
    if "name" in data:
        data = {**data, "name": _check_position_name(db, data["name"], exclude_id=position.id)}
    for key, value in data.items():
        setattr(position, key, value)
    db.add(position)
    db.commit()
    db.refresh(position)
    return position


def delete_job_position(db: Session, position: JobPosition) -> JobPosition:
    """Remove a job position; profiles referencing it are cleared by the FK."""
    db.query(Profile).filter(Profile.job_position_id == position.id).update(
        {Profile.job_position_id: None}
    )
    db.delete(position)
    db.commit()
    return position
