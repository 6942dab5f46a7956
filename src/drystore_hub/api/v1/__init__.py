# src/drystore_hub/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    activity_router,
    admin_router,
    announcements_router,
    auth_router,
    channels_router,
    direct_messages_router,
    documents_router,
    functions_router,
    invitations_router,
    knowledge_base_router,
    mentions_router,
    messages_router,
    notifications_router,
    people_router,
    realtime_router,
    storage_router,
)

API_ROUTERS = (
    auth_router,
    channels_router,
    messages_router,
    direct_messages_router,
    mentions_router,
    notifications_router,
    documents_router,
    knowledge_base_router,
    announcements_router,
    people_router,
    activity_router,
    admin_router,
    invitations_router,
    functions_router,
    storage_router,
)

__all__ = [
    "API_ROUTERS",
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
