# tests/v1/test_storage.py
"""Tests for the storage endpoints."""

from __future__ import annotations

from fastapi import status

from drystore_hub.services import storage as storage_service


def _upload(client, headers, bucket: str, path: str, data: bytes = b"img", **params):
    return client.post(
        f"/api/v1/storage/{bucket}/upload",
        params={"path": path, **params},
        files={"file": ("blob.png", data, "image/png")},
        headers=headers,
    )


def test_avatar_paths_are_scoped_to_owner(client, test_user, other_user, auth_token) -> None:
    own = _upload(client, auth_token, storage_service.AVATARS, f"{test_user.id}/avatar.png")
    assert own.status_code == status.HTTP_201_CREATED

    foreign = _upload(client, auth_token, storage_service.AVATARS, f"{other_user.id}/avatar.png")
    assert foreign.status_code == status.HTTP_403_FORBIDDEN


def test_upsert_controls_overwrite(client, test_user, auth_token) -> None:
    path = f"{test_user.id}/avatar.png"
    _upload(client, auth_token, storage_service.AVATARS, path)

    assert _upload(client, auth_token, storage_service.AVATARS, path).status_code == 400
    assert _upload(client, auth_token, storage_service.AVATARS, path, upsert=True).status_code == 201


def test_message_attachments_staged_under_temp(client, auth_token) -> None:
    bucket = storage_service.MESSAGE_ATTACHMENTS
    assert _upload(client, auth_token, bucket, "final/a.png").status_code == status.HTTP_403_FORBIDDEN

    assert _upload(client, auth_token, bucket, "temp/a.png").status_code == status.HTTP_201_CREATED
    moved = client.post(
        f"/api/v1/storage/{bucket}/move",
        json={"source": "temp/a.png", "destination": "msg-1/a.png"},
        headers=auth_token,
    )
    assert moved.json()["path"] == "msg-1/a.png"
    assert client.get(f"/api/v1/storage/{bucket}/list", params={"prefix": "temp"}, headers=auth_token).json() == []


def test_signed_url_download(client, auth_token) -> None:
    bucket = storage_service.MESSAGE_ATTACHMENTS
    _upload(client, auth_token, bucket, "temp/b.png", data=b"payload")

    signed = client.post(
        f"/api/v1/storage/{bucket}/sign",
        params={"path": "temp/b.png", "expires_in": 30},
        headers=auth_token,
    ).json()
    assert signed["expires_in"] == 30

    response = client.get(signed["signed_url"])
    assert response.status_code == status.HTTP_200_OK
    assert response.content == b"payload"

    assert client.get("/api/v1/storage/signed/bogus").status_code == status.HTTP_403_FORBIDDEN


def test_public_download_limited_to_public_buckets(client, test_user, isolated_storage) -> None:
    isolated_storage.upload(storage_service.AVATARS, f"{test_user.id}/a.png", b"face")
    isolated_storage.upload(storage_service.DOCUMENT_ATTACHMENTS, "documents/x/a.pdf", b"secret")

    public = client.get(f"/api/v1/storage/public/avatars/{test_user.id}/a.png")
    assert public.status_code == status.HTTP_200_OK
    assert public.content == b"face"
    assert public.headers["content-disposition"].startswith("inline")
    assert public.headers["content-type"] == "image/png"

    hidden = client.get("/api/v1/storage/public/document_attachments/documents/x/a.pdf")
    assert hidden.status_code == status.HTTP_404_NOT_FOUND
