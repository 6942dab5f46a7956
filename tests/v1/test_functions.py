# tests/v1/test_functions.py
"""Tests for invitation delivery, public acceptance and exports."""

from __future__ import annotations

from fastapi import status

from drystore_hub.models import Invitation
from drystore_hub.services import messages as message_service


def test_send_invitation_requires_admin(client, auth_token, sent_emails) -> None:
    response = client.post(
        "/api/v1/functions/send-invitation",
        json={"email": "nova@drystore.com.br"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert sent_emails == []


def test_failed_delivery_returns_bad_gateway(client, db_session, admin_auth_token, failing_email) -> None:
    response = client.post(
        "/api/v1/functions/send-invitation",
        json={"email": "nova@drystore.com.br"},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert db_session.query(Invitation).count() == 0


def test_invitation_accept_flow(client, channel, admin_auth_token, sent_emails) -> None:
    sent = client.post(
        "/api/v1/functions/send-invitation",
        json={"email": "nova@drystore.com.br", "message": "Bem-vinda!"},
        headers=admin_auth_token,
    )
    assert sent.status_code == status.HTTP_200_OK
    token = sent.json()["invite_url"].rsplit("/", 1)[-1]

    preview = client.get(f"/api/v1/invitations/{token}")
    assert preview.status_code == status.HTTP_200_OK
    assert preview.json()["inviter_name"] == "Admin User"

    accepted = client.post(
        f"/api/v1/invitations/{token}/accept",
        json={"password": "secret123", "confirm_password": "secret123", "display_name": "Nova"},
    )
    assert accepted.status_code == status.HTTP_201_CREATED
    headers = {"Authorization": f"Bearer {accepted.json()['access_token']}"}

    me = client.get("/api/v1/auth/me", headers=headers).json()
    assert me["email"] == "nova@drystore.com.br"
    assert client.get(f"/api/v1/channels/{channel.id}/membership", headers=headers).json()["is_member"] is True

    assert client.get(f"/api/v1/invitations/{token}").status_code == status.HTTP_404_NOT_FOUND


def test_unknown_invitation_token(client) -> None:
    assert client.get("/api/v1/invitations/does-not-exist").status_code == status.HTTP_404_NOT_FOUND


def test_csv_export_download(client, db_session, channel, admin_user, admin_auth_token) -> None:
    message_service.send_message(db_session, admin_user, channel.id, "estoque atualizado")

    response = client.post(
        "/api/v1/functions/export-conversations",
        json={"channel_id": channel.id, "format": "csv"},
        headers=admin_auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="channel-geral-' in response.headers["content-disposition"]
    assert response.text.splitlines()[1].startswith('"Admin User","estoque atualizado"')


def test_export_requires_admin(client, channel, auth_token) -> None:
    response = client.post(
        "/api/v1/functions/export-conversations",
        json={"channel_id": channel.id},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
