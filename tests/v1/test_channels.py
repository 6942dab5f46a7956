# tests/v1/test_channels.py
"""Tests for channel and membership endpoints."""

from __future__ import annotations

from fastapi import status

from drystore_hub.services import channels as channel_service


def test_only_admins_create_channels(client, auth_token, admin_auth_token) -> None:
    payload = {"name": "vendas", "description": "Equipe de vendas"}

    assert client.post("/api/v1/channels/", json=payload, headers=auth_token).status_code == status.HTTP_403_FORBIDDEN

    response = client.post("/api/v1/channels/", json=payload, headers=admin_auth_token)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["is_member"] is True


def test_duplicate_channel_name_conflicts(client, channel, admin_auth_token) -> None:
    response = client.post("/api/v1/channels/", json={"name": "geral"}, headers=admin_auth_token)
    assert response.status_code == status.HTTP_409_CONFLICT


def test_private_channel_cannot_be_joined(client, db_session, admin_user, other_auth_token) -> None:
    private = channel_service.create_channel(db_session, admin_user, "diretoria", is_private=True)

    response = client.post(f"/api/v1/channels/{private.id}/join", headers=other_auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    listed = client.get("/api/v1/channels/", headers=other_auth_token).json()
    assert private.id not in {item["id"] for item in listed}


def test_join_and_leave_public_channel(client, channel, other_auth_token) -> None:
    joined = client.post(f"/api/v1/channels/{channel.id}/join", headers=other_auth_token)
    assert joined.status_code == status.HTTP_201_CREATED
    assert joined.json()["role"] == "member"

    again = client.post(f"/api/v1/channels/{channel.id}/join", headers=other_auth_token)
    assert again.status_code == status.HTTP_409_CONFLICT

    left = client.post(f"/api/v1/channels/{channel.id}/leave", headers=other_auth_token)
    assert left.json()["is_member"] is False


def test_mention_suggestions_filter_members(client, channel, auth_token) -> None:
    response = client.get(
        f"/api/v1/channels/{channel.id}/mention-suggestions",
        params={"q": "adm"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert [item["label"] for item in response.json()] == ["Admin User"]
