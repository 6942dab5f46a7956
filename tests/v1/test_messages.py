# tests/v1/test_messages.py
"""Tests for channel messages and the mentions inbox."""

from __future__ import annotations

from fastapi import status


def test_member_posts_and_lists_messages(client, channel, auth_token) -> None:
    response = client.post(
        f"/api/v1/messages/channel/{channel.id}",
        json={"content": "bom dia"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["author"]["display_name"] == "Test User"

    listed = client.get(f"/api/v1/messages/channel/{channel.id}", headers=auth_token).json()
    assert [item["content"] for item in listed] == ["bom dia"]


def test_non_member_cannot_post(client, channel, other_auth_token) -> None:
    response = client.post(
        f"/api/v1/messages/channel/{channel.id}",
        json={"content": "olá"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_empty_message_rejected(client, channel, auth_token) -> None:
    response = client.post(f"/api/v1/messages/channel/{channel.id}", json={"content": "  "}, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_only_author_can_edit(client, channel, auth_token, admin_auth_token) -> None:
    created = client.post(
        f"/api/v1/messages/channel/{channel.id}",
        json={"content": "rascunho"},
        headers=auth_token,
    ).json()

    forbidden = client.patch(f"/api/v1/messages/{created['id']}", json={"content": "x"}, headers=admin_auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    edited = client.patch(f"/api/v1/messages/{created['id']}", json={"content": "final"}, headers=auth_token)
    assert edited.status_code == status.HTTP_200_OK
    assert edited.json()["edited"] is True


def test_mentions_inbox_flow(client, channel, auth_token, admin_auth_token) -> None:
    client.post(
        f"/api/v1/messages/channel/{channel.id}",
        json={"content": "@Test User confira o estoque"},
        headers=admin_auth_token,
    )

    assert client.get("/api/v1/mentions/unread-count", headers=auth_token).json() == {"count": 1}
    inbox = client.get("/api/v1/mentions/", headers=auth_token).json()
    assert inbox[0]["channel_name"] == "geral"
    assert inbox[0]["is_read"] is False

    marked = client.post("/api/v1/mentions/read-all", headers=auth_token)
    assert marked.json()["marked"] == 1
    assert client.get("/api/v1/mentions/unread-count", headers=auth_token).json() == {"count": 0}


def test_conversations_list(client, channel, auth_token) -> None:
    response = client.get("/api/v1/messages/conversations", params={"q": "geral"}, headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert [item["id"] for item in response.json()] == [channel.id]
