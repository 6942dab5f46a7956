# tests/services/test_mentions.py
"""Tests for mention suggestion, extraction and storage on messages."""

from __future__ import annotations

from drystore_hub.models import MessageMention
from drystore_hub.services import mention_inbox
from drystore_hub.services import messages as message_service
from drystore_hub.services.mentions import (
    MentionCandidate,
    MentionSuggester,
    build_mention_node,
    collect_mentions,
    extract_mentions,
    resolve_text_mentions,
)

MEMBERS = [
    MentionCandidate(user_id="u123", display_name="Jane"),
    MentionCandidate(user_id="u456", display_name="Jane Doe"),
    MentionCandidate(user_id="u789", display_name="Carlos"),
]


def test_plain_text_mention_resolves_member() -> None:
    assert resolve_text_mentions("hello @Jane", MEMBERS[:1]) == [
        {"user_id": "u123", "display_name": "Jane"}
    ]


def test_longest_display_name_wins() -> None:
    found = resolve_text_mentions("ping @Jane Doe please", MEMBERS)
    assert [entry["user_id"] for entry in found] == ["u456"]


def test_email_like_text_is_not_a_mention() -> None:
    assert resolve_text_mentions("write to carlos@Carlos.com", MEMBERS) == []


def test_rich_document_mentions_are_deduplicated() -> None:
    node = build_mention_node(MEMBERS[2])
    doc = {
        "type": "doc",
        "content": [{"type": "paragraph", "content": [node, {"type": "text", "text": " oi "}, node]}],
    }
    assert extract_mentions(doc) == [{"user_id": "u789", "display_name": "Carlos"}]


def test_rich_mentions_outside_channel_are_dropped() -> None:
    stranger = build_mention_node(MentionCandidate(user_id="x1", display_name="Stranger"))
    doc = {"type": "doc", "content": [{"type": "paragraph", "content": [stranger]}]}
    assert collect_mentions(doc, MEMBERS) == []


def test_suggester_filters_case_insensitively_and_limits() -> None:
    suggester = MentionSuggester(MEMBERS, limit=1)
    assert [m.user_id for m in suggester.search("jane")] == ["u123", "u456"]
    assert [m.user_id for m in suggester.items("jane")] == ["u123"]
    assert len(suggester.items("")) == 1


def test_sending_message_indexes_mentions(db_session, channel, test_user, admin_user) -> None:
    message = message_service.send_message(
        db_session, admin_user, channel.id, f"bom dia @{test_user.display_name}"
    )

    assert message.mentions == [{"user_id": test_user.id, "display_name": test_user.display_name}]
    rows = db_session.query(MessageMention).filter(MessageMention.message_id == message.id).all()
    assert [row.user_id for row in rows] == [test_user.id]
    assert mention_inbox.unread_mention_count(db_session, test_user.id) == 1


def test_mark_all_mentions_read(db_session, channel, test_user, admin_user) -> None:
    for text in ("oi @Test User", "de novo @Test User"):
        message_service.send_message(db_session, admin_user, channel.id, text)

    assert mention_inbox.mark_all_mentions_read(db_session, test_user.id) == 2
    assert mention_inbox.unread_mention_count(db_session, test_user.id) == 0
    assert all(item.is_read for item in mention_inbox.list_mentions(db_session, test_user.id))
