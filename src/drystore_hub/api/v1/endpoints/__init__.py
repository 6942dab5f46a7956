# src/drystore_hub/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .activity import router as activity_router
from .admin import router as admin_router
from .announcements import router as announcements_router
from .auth import router as auth_router
from .channels import router as channels_router
from .direct_messages import router as direct_messages_router
from .documents import router as documents_router
from .functions import router as functions_router
from .invitations import router as invitations_router
from .knowledge_base import router as knowledge_base_router
from .mentions import router as mentions_router
from .messages import router as messages_router
from .notifications import router as notifications_router
from .people import router as people_router
from .realtime import router as realtime_router
from .storage import router as storage_router

__all__ = [
    "activity_router",
    "admin_router",
    "announcements_router",
    "auth_router",
    "channels_router",
    "direct_messages_router",
    "documents_router",
    "functions_router",
    "invitations_router",
    "knowledge_base_router",
    "mentions_router",
    "messages_router",
    "notifications_router",
    "people_router",
    "realtime_router",
    "storage_router",
]
