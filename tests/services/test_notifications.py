# tests/services/test_notifications.py
"""Tests for badge counts, pending tasks and metrics."""

from __future__ import annotations

from drystore_hub.models import Priority
from drystore_hub.services import announcements as announcement_service
from drystore_hub.services import documents as document_service
from drystore_hub.services import messages as message_service
from drystore_hub.services import notifications as notification_service
from drystore_hub.services import read_tracking


def test_counts_scope_messages_to_member_channels(db_session, channel, admin_user, test_user, other_user) -> None:
    message_service.send_message(db_session, admin_user, channel.id, "reunião às 10h")

    assert notification_service.notification_counts(db_session, test_user).total_messages == 1
    assert notification_service.notification_counts(db_session, other_user).total_messages == 0


def test_pending_tasks_clear_after_reads(db_session, admin_user, test_user) -> None:
    announcement = announcement_service.create_announcement(
        db_session, admin_user, {"title": "Inventário", "priority": Priority.URGENT}
    )
    document = document_service.create_document(db_session, admin_user, {"title": "Manual"})

    pending = notification_service.pending_tasks(db_session, test_user)
    assert {task.id for task in pending.tasks} == {
        f"announcement-{announcement.id}",
        f"document-{document.id}",
    }
    assert pending.urgent_count == 1
    assert [task.resource_id for task in pending.by_priority()["normal"]] == [document.id]

    read_tracking.mark_announcement_read(db_session, test_user.id, announcement.id)
    read_tracking.record_scroll_complete(db_session, test_user.id, document.id)
    read_tracking.confirm_document_read(db_session, test_user.id, document.id)

    assert notification_service.pending_tasks(db_session, test_user).total_count == 0
    assert notification_service.notification_counts(db_session, test_user).documents == 0


def test_engagement_rate_handles_empty_inputs() -> None:
    assert notification_service.engagement_rate(0, 0, 5) == 0
    assert notification_service.engagement_rate(3, 2, 3) == 50


def test_admin_metrics_include_totals(db_session, admin_user, test_user) -> None:
    metrics = notification_service.personal_metrics(db_session, admin_user)
    assert metrics.total_users == 2
    assert notification_service.personal_metrics(db_session, test_user).total_users is None
