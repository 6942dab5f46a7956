# tests/services/test_messages.py
"""Tests for posting and editing channel messages."""

from __future__ import annotations

import pytest

from drystore_hub.services import channels as channel_service
from drystore_hub.services import messages as message_service
from drystore_hub.services import storage as storage_service


def test_content_type_follows_content(db_session, channel, test_user) -> None:
    plain = message_service.send_message(db_session, test_user, channel.id, "bom dia")
    html = message_service.send_message(db_session, test_user, channel.id, "<b>bom</b> dia")

    assert plain.content_type == message_service.CONTENT_TYPE_TEXT
    assert html.content_type == message_service.CONTENT_TYPE_RICH


def test_attachment_only_message_is_allowed(db_session, channel, test_user, isolated_storage) -> None:
    isolated_storage.upload(storage_service.MESSAGE_ATTACHMENTS, "temp/att-1", b"pdf")

    message = message_service.send_message(
        db_session,
        test_user,
        channel.id,
        "",
        attachments=[{"id": "att-1", "name": "nota.pdf"}],
    )

    assert message.attachments == [{"id": "att-1", "name": "nota.pdf", "path": f"{message.id}/att-1"}]
    assert isolated_storage.download(storage_service.MESSAGE_ATTACHMENTS, f"{message.id}/att-1") == b"pdf"
    assert isolated_storage.list(storage_service.MESSAGE_ATTACHMENTS, "temp") == []


def test_empty_message_rejected(db_session, channel, test_user) -> None:
    with pytest.raises(message_service.MessageError):
        message_service.send_message(db_session, test_user, channel.id, "   ")


def test_reply_must_stay_in_channel(db_session, channel, admin_user, test_user) -> None:
    other = channel_service.create_channel(db_session, admin_user, "vendas")
    foreign = message_service.send_message(db_session, admin_user, other.id, "lá")

    with pytest.raises(message_service.MessageError):
        message_service.send_message(db_session, test_user, channel.id, "aqui", reply_to_id=foreign.id)

    parent = message_service.send_message(db_session, admin_user, channel.id, "pergunta")
    reply = message_service.send_message(db_session, test_user, channel.id, "resposta", reply_to_id=parent.id)
    assert reply.reply_to_id == parent.id


def test_edit_marks_message_edited(db_session, channel, test_user, other_user) -> None:
    message = message_service.send_message(db_session, test_user, channel.id, "rascunho")

    with pytest.raises(message_service.MessageError):
        message_service.edit_message(db_session, other_user, message, "hack")

    edited = message_service.edit_message(db_session, test_user, message, "final")
    assert edited.edited is True
    assert edited.content == "final"
