"""initial schema

Revision ID: 1a7c3e9d2b40
Revises:
Create Date: 2026-10-17 09:12:41.318205

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "1a7c3e9d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), nullable=False)


def _user_fk(name: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.String(length=36), nullable=nullable)


def _timestamp(name: str, *, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Create the intranet schema."""
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "job_positions",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("department", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "profiles",
        _id(),
        _user_fk("user_id"),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("theme", sa.String(length=16), nullable=False),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False),
        sa.Column("job_position_id", sa.String(length=36), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("status IN ('online', 'away', 'busy', 'offline')", name="ck_profiles_status"),
        sa.CheckConstraint("theme IN ('light', 'dark', 'system')", name="ck_profiles_theme"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["job_position_id"], ["job_positions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "user_roles",
        _id(),
        _user_fk("user_id"),
        sa.Column("permission", sa.String(length=16), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("permission IN ('admin', 'user')", name="ck_user_roles_permission"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "permission", name="uq_user_roles_user_permission"),
    )

    op.create_table(
        "channels",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        _user_fk("created_by"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "channel_members",
        _id(),
        sa.Column("channel_id", sa.String(length=36), nullable=False),
        _user_fk("user_id"),
        sa.Column("role", sa.String(length=16), nullable=False),
        _timestamp("joined_at"),
        sa.CheckConstraint("role IN ('member', 'admin')", name="ck_channel_members_role"),
        sa.ForeignKeyConstraint(["channel_id"], ["channels.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("channel_id", "user_id", name="uq_channel_members_channel_user"),
    )
    op.create_index("ix_channel_members_channel_id", "channel_members", ["channel_id"])
    op.create_index("ix_channel_members_user_id", "channel_members", ["user_id"])

    op.create_table(
        "messages",
        _id(),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("content_type", sa.String(length=8), nullable=False),
        _user_fk("user_id"),
        sa.Column("channel_id", sa.String(length=36), nullable=False),
        sa.Column("reply_to_id", sa.String(length=36), nullable=True),
        sa.Column("attachments", sa.JSON(), nullable=False),
        sa.Column("mentions", sa.JSON(), nullable=False),
        sa.Column("edited", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["channel_id"], ["channels.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["reply_to_id"], ["messages.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_messages_user_id", "messages", ["user_id"])
    op.create_index("ix_messages_channel_id", "messages", ["channel_id"])
    op.create_index("ix_messages_created_at", "messages", ["created_at"])

    op.create_table(
        "message_mentions",
        _id(),
        sa.Column("message_id", sa.String(length=36), nullable=False),
        _user_fk("user_id"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["message_id"], ["messages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("message_id", "user_id", name="uq_message_mentions_message_user"),
    )
    op.create_index("ix_message_mentions_user_id", "message_mentions", ["user_id"])

    op.create_table(
        "mention_reads",
        _id(),
        _user_fk("user_id"),
        sa.Column("message_id", sa.String(length=36), nullable=False),
        _timestamp("read_at"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["message_id"], ["messages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "message_id", name="uq_mention_reads_user_message"),
    )

    op.create_table(
        "direct_messages",
        _id(),
        _user_fk("sender_user_id"),
        _user_fk("recipient_user_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["sender_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["recipient_user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_direct_messages_sender_user_id", "direct_messages", ["sender_user_id"])
    op.create_index("ix_direct_messages_recipient_user_id", "direct_messages", ["recipient_user_id"])

    op.create_table(
        "document_categories",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(length=16), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "documents",
        _id(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        _user_fk("created_by"),
        _user_fk("last_modified_by", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.ForeignKeyConstraint(["last_modified_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "document_reads",
        _id(),
        sa.Column("document_id", sa.String(length=36), nullable=False),
        _user_fk("user_id"),
        _timestamp("read_at"),
        _timestamp("scrolled_to_end_at"),
        sa.Column("confirmed_read", sa.Boolean(), nullable=False),
        _timestamp("confirmed_at"),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("document_id", "user_id", name="uq_document_reads_pair"),
    )

    op.create_table(
        "announcements",
        _id(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("priority", sa.String(length=16), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        _user_fk("author_user_id", nullable=True),
        _timestamp("publish_date"),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "priority IN ('urgent', 'important', 'normal', 'info')",
            name="ck_announcements_priority",
        ),
        sa.ForeignKeyConstraint(["author_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_announcements_publish_date", "announcements", ["publish_date"])

    op.create_table(
        "announcement_reads",
        _id(),
        sa.Column("announcement_id", sa.String(length=36), nullable=False),
        _user_fk("user_id"),
        _timestamp("read_at"),
        sa.ForeignKeyConstraint(["announcement_id"], ["announcements.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("announcement_id", "user_id", name="uq_announcement_reads_pair"),
    )

    op.create_table(
        "invitations",
        _id(),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        _user_fk("invited_by"),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        _timestamp("expires_at", nullable=False),
        _timestamp("accepted_at"),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "status IN ('pending', 'sent', 'accepted', 'expired', 'cancelled')",
            name="ck_invitations_status",
        ),
        sa.ForeignKeyConstraint(["invited_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])
    op.create_index("ix_invitations_token", "invitations", ["token"], unique=True)


def downgrade() -> None:
    """Drop the intranet schema."""
    op.drop_index("ix_invitations_token", table_name="invitations")
    op.drop_index("ix_invitations_email", table_name="invitations")
    op.drop_table("invitations")
    op.drop_table("announcement_reads")
    op.drop_index("ix_announcements_publish_date", table_name="announcements")
    op.drop_table("announcements")
    op.drop_table("document_reads")
    op.drop_table("documents")
    op.drop_table("document_categories")
    op.drop_index("ix_direct_messages_recipient_user_id", table_name="direct_messages")
    op.drop_index("ix_direct_messages_sender_user_id", table_name="direct_messages")
    op.drop_table("direct_messages")
    op.drop_table("mention_reads")
    op.drop_index("ix_message_mentions_user_id", table_name="message_mentions")
    op.drop_table("message_mentions")
    op.drop_index("ix_messages_created_at", table_name="messages")
    op.drop_index("ix_messages_channel_id", table_name="messages")
    op.drop_index("ix_messages_user_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("ix_channel_members_user_id", table_name="channel_members")
    op.drop_index("ix_channel_members_channel_id", table_name="channel_members")
    op.drop_table("channel_members")
    op.drop_table("channels")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_table("job_positions")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
