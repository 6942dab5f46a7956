# tests/v1/test_realtime.py
"""Tests for the change-feed WebSocket."""

from __future__ import annotations

import time

import pytest
from starlette.websockets import WebSocketDisconnect

from drystore_hub.core.security import create_access_token
from drystore_hub.services.change_feed import ChangeType


def _wait_for_subscriber(feed, expected: int = 1, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while feed.subscriber_count != expected:
        assert time.monotonic() < deadline, f"expected {expected} subscribers, have {feed.subscriber_count}"
        time.sleep(0.01)


def _stream_url(user, tables: str) -> str:
    return f"/ws/changes?token={create_access_token(user.id)}&tables={tables}"


def test_stream_delivers_matching_changes(client, test_user, channel, isolated_change_feed) -> None:
    with client.websocket_connect(_stream_url(test_user, "messages")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish("documents", ChangeType.INSERT, {"id": "d1", "is_public": True})
        isolated_change_feed.publish("messages", ChangeType.INSERT, {"id": "m1", "channel_id": channel.id})

        frame = websocket.receive_json()

    assert frame["table"] == "messages"
    assert frame["event"] == "INSERT"
    assert frame["record"] == {"id": "m1", "channel_id": channel.id}


def test_invalid_token_is_refused(client) -> None:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/changes?token=bad") as websocket:
            websocket.receive_json()
    assert exc_info.value.code == 1008


def test_messages_reach_channel_members_only(client, other_user, channel, isolated_change_feed) -> None:
    with client.websocket_connect(_stream_url(other_user, "messages,profiles")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish("messages", ChangeType.INSERT, {"id": "m1", "channel_id": channel.id})
        isolated_change_feed.publish("profiles", ChangeType.UPDATE, {"id": "p1"})

        frame = websocket.receive_json()

    assert frame["table"] == "profiles"


def test_direct_messages_reach_participants_only(
    client, test_user, other_user, admin_user, isolated_change_feed
) -> None:
    dm = {"id": "dm1", "sender_user_id": test_user.id, "recipient_user_id": admin_user.id, "content": "oi"}
    with client.websocket_connect(_stream_url(other_user, "direct_messages,profiles")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish("direct_messages", ChangeType.INSERT, dm)
        isolated_change_feed.publish("profiles", ChangeType.UPDATE, {"id": "p1"})

        frame = websocket.receive_json()

    assert frame["table"] == "profiles"


def test_invitations_are_admin_only_and_never_carry_tokens(
    client, test_user, admin_user, isolated_change_feed
) -> None:
    invitation = {"id": "i1", "email": "novo@drystore.com.br", "token": "s3cr3t", "status": "sent"}

    with client.websocket_connect(_stream_url(test_user, "invitations,profiles")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish("invitations", ChangeType.INSERT, invitation)
        isolated_change_feed.publish("profiles", ChangeType.UPDATE, {"id": "p1"})
        assert websocket.receive_json()["table"] == "profiles"
    _wait_for_subscriber(isolated_change_feed, expected=0)

    with client.websocket_connect(_stream_url(admin_user, "invitations")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish("invitations", ChangeType.INSERT, invitation)
        frame = websocket.receive_json()

    assert frame["record"]["email"] == "novo@drystore.com.br"
    assert "token" not in frame["record"]


def test_new_membership_opens_channel_messages(client, other_user, isolated_change_feed) -> None:
    with client.websocket_connect(_stream_url(other_user, "messages")) as websocket:
        _wait_for_subscriber(isolated_change_feed)
        isolated_change_feed.publish(
            "channel_members", ChangeType.INSERT, {"id": "cm1", "channel_id": "c2", "user_id": other_user.id}
        )
        isolated_change_feed.publish("messages", ChangeType.INSERT, {"id": "m2", "channel_id": "c2"})

        frame = websocket.receive_json()

    assert frame["record"]["id"] == "m2"
