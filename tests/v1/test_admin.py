# tests/v1/test_admin.py
"""Tests for administrative endpoints."""

from __future__ import annotations

from fastapi import status


def test_admin_routes_reject_regular_users(client, auth_token) -> None:
    assert client.get("/api/v1/admin/users", headers=auth_token).status_code == status.HTTP_403_FORBIDDEN


def test_grant_admin_role(client, test_user, admin_auth_token, auth_token) -> None:
    response = client.put(
        f"/api/v1/admin/users/{test_user.id}/role",
        json={"is_admin": True},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_admin"] is True
    assert client.get("/api/v1/admin/users", headers=auth_token).status_code == status.HTTP_200_OK


def test_admin_cannot_revoke_own_role(client, admin_user, admin_auth_token) -> None:
    response = client.put(
        f"/api/v1/admin/users/{admin_user.id}/role",
        json={"is_admin": False},
        headers=admin_auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_job_positions_and_assignment(client, test_user, admin_auth_token) -> None:
    created = client.post(
        "/api/v1/admin/job-positions",
        json={"name": "Vendedor", "department": "Comercial"},
        headers=admin_auth_token,
    )
    assert created.status_code == status.HTTP_201_CREATED
    position_id = created.json()["id"]

    duplicate = client.post("/api/v1/admin/job-positions", json={"name": "Vendedor"}, headers=admin_auth_token)
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    assigned = client.put(
        f"/api/v1/admin/users/{test_user.id}/job-position",
        json={"job_position_id": position_id},
        headers=admin_auth_token,
    )
    assert assigned.json()["job_position"]["name"] == "Vendedor"


def test_invitation_listing_and_cancel(client, admin_auth_token, sent_emails) -> None:
    client.post(
        "/api/v1/functions/send-invitation",
        json={"email": "convite@drystore.com.br"},
        headers=admin_auth_token,
    )
    listed = client.get("/api/v1/admin/invitations", headers=admin_auth_token).json()
    assert [(item["email"], item["status"]) for item in listed] == [("convite@drystore.com.br", "sent")]

    invitation_id = listed[0]["id"]
    cancelled = client.post(f"/api/v1/admin/invitations/{invitation_id}/cancel", headers=admin_auth_token)
    assert cancelled.status_code == status.HTTP_200_OK

    again = client.post(f"/api/v1/admin/invitations/{invitation_id}/cancel", headers=admin_auth_token)
    assert again.status_code == status.HTTP_409_CONFLICT


def test_job_position_rename_is_validated(client, admin_auth_token) -> None:
    url = "/api/v1/admin/job-positions"
    client.post(url, json={"name": "Vendedor"}, headers=admin_auth_token)
    other = client.post(url, json={"name": "Gerente"}, headers=admin_auth_token).json()

    null_name = client.patch(f"{url}/{other['id']}", json={"name": None}, headers=admin_auth_token)
    assert null_name.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    taken = client.patch(f"{url}/{other['id']}", json={"name": "Vendedor"}, headers=admin_auth_token)
    assert taken.status_code == status.HTTP_409_CONFLICT

    moved = client.patch(f"{url}/{other['id']}", json={"department": "Comercial"}, headers=admin_auth_token)
    assert moved.status_code == status.HTTP_200_OK
    assert moved.json()["name"] == "Gerente"
