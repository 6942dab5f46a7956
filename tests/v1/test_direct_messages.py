# tests/v1/test_direct_messages.py
"""Tests for direct message endpoints."""

from __future__ import annotations

from fastapi import status


def test_send_and_read_direct_message(client, test_user, other_user, auth_token, other_auth_token) -> None:
    sent = client.post(
        "/api/v1/direct-messages/",
        json={"recipient_user_id": other_user.id, "content": "pode revisar o pedido?"},
        headers=auth_token,
    )
    assert sent.status_code == status.HTTP_201_CREATED
    message_id = sent.json()["id"]

    inbox = client.get("/api/v1/direct-messages/inbox", headers=other_auth_token).json()
    assert [(item["id"], item["read"]) for item in inbox] == [(message_id, False)]

    forbidden = client.put(f"/api/v1/direct-messages/{message_id}/read", headers=auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    marked = client.put(f"/api/v1/direct-messages/{message_id}/read", headers=other_auth_token)
    assert marked.json()["read"] is True

    thread = client.get(f"/api/v1/direct-messages/with/{test_user.id}", headers=other_auth_token).json()
    assert [item["content"] for item in thread] == ["pode revisar o pedido?"]


def test_cannot_message_self_or_unknown(client, test_user, auth_token) -> None:
    to_self = client.post(
        "/api/v1/direct-messages/",
        json={"recipient_user_id": test_user.id, "content": "oi"},
        headers=auth_token,
    )
    assert to_self.status_code == status.HTTP_400_BAD_REQUEST

    unknown = client.post(
        "/api/v1/direct-messages/",
        json={"recipient_user_id": "missing", "content": "oi"},
        headers=auth_token,
    )
    assert unknown.status_code == status.HTTP_404_NOT_FOUND
