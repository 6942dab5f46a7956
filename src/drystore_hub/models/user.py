"""SQLAlchemy models for accounts, profiles and permissions."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from drystore_hub.db.session import Base
from drystore_hub.db.time import utcnow

from ._ids import new_id


class UserStatus(enum.StrEnum):
    """Presence shown next to a profile."""

    ONLINE = "online"
    AWAY = "away"
    BUSY = "busy"
    OFFLINE = "offline"


class Theme(enum.StrEnum):
    """UI theme preference stored with the profile."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class Permission(enum.StrEnum):
    """Role granted through ``user_roles``."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Login identity. Display data lives on :class:`Profile`."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    profile: Mapped[Profile] = relationship(
        "Profile",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )
    roles: Mapped[list[UserRole]] = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        """Return True when an ``admin`` role row exists."""
        return any(role.permission == Permission.ADMIN for role in self.roles)

    @property
    def display_name(self) -> str | None:
        """Return the profile display name, if any."""
        return self.profile.display_name if self.profile else None


class Profile(Base):
    """Per-user display identity and preferences."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "status IN ('online', 'away', 'busy', 'offline')",
            name="ck_profiles_status",
        ),
        CheckConstraint("theme IN ('light', 'dark', 'system')", name="ck_profiles_theme"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=UserStatus.OFFLINE.value)
    theme: Mapped[str] = mapped_column(String(16), nullable=False, default=Theme.SYSTEM.value)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    job_position_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("job_positions.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    user: Mapped[User] = relationship("User", back_populates="profile")
    job_position: Mapped[JobPosition | None] = relationship("JobPosition")


class UserRole(Base):
    """Permission grant; at most one row per (user, permission)."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "permission", name="uq_user_roles_user_permission"),
        CheckConstraint("permission IN ('admin', 'user')", name="ck_user_roles_permission"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    permission: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    user: Mapped[User] = relationship("User", back_populates="roles")


class JobPosition(Base):
    """Job title a profile can reference."""

    __tablename__ = "job_positions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    department: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
