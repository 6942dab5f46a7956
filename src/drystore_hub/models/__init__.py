"""SQLAlchemy models for the DryStore Hub application."""

from .announcement import Announcement, AnnouncementRead, Priority
from .channel import Channel, ChannelMember, MemberRole
from .direct_message import DirectMessage
from .document import Document, DocumentCategory, DocumentRead
from .invitation import Invitation, InvitationStatus
from .message import MentionRead, Message, MessageMention
from .user import JobPosition, Permission, Profile, Theme, User, UserRole, UserStatus

__all__ = [
    "Announcement", "AnnouncementRead", "Priority",
    "Channel", "ChannelMember", "MemberRole",
    "DirectMessage",
    "Document", "DocumentCategory", "DocumentRead",
    "Invitation", "InvitationStatus",
    "MentionRead", "Message", "MessageMention",
    "JobPosition", "Permission", "Profile", "Theme", "User", "UserRole", "UserStatus",
]
