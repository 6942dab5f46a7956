# tests/v1/test_people.py
"""Tests for the people directory and profile settings."""

from __future__ import annotations

from fastapi import status


def test_directory_search(client, test_user, other_user, auth_token) -> None:
    everyone = client.get("/api/v1/people", headers=auth_token).json()
    assert [person["display_name"] for person in everyone] == ["Other User", "Test User"]

    found = client.get("/api/v1/people", params={"q": "other"}, headers=auth_token).json()
    assert [person["user_id"] for person in found] == [other_user.id]


def test_unknown_person_is_404(client, auth_token) -> None:
    assert client.get("/api/v1/people/missing", headers=auth_token).status_code == status.HTTP_404_NOT_FOUND


def test_update_settings(client, auth_token) -> None:
    response = client.patch(
        "/api/v1/settings",
        json={"display_name": "  Maria  ", "theme": "dark", "status": "busy"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["display_name"] == "Maria"
    assert data["theme"] == "dark"

    assert client.patch("/api/v1/settings", json={}, headers=auth_token).status_code == 400


def test_avatar_upload_sets_public_url(client, test_user, auth_token) -> None:
    response = client.post(
        "/api/v1/settings/avatar",
        files={"file": ("me.PNG", b"\x89PNG", "image/png")},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["avatar_url"].endswith(f"/avatars/{test_user.id}/{test_user.id}.png")

    rejected = client.post(
        "/api/v1/settings/avatar",
        files={"file": ("notes.txt", b"hi", "text/plain")},
        headers=auth_token,
    )
    assert rejected.status_code == status.HTTP_400_BAD_REQUEST
