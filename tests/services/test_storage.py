# tests/services/test_storage.py
"""Tests for the filesystem object store."""

from __future__ import annotations

import pytest

from drystore_hub.services import storage as storage_service
from drystore_hub.services.storage import ObjectNotFoundError, StorageError


def test_upload_refuses_overwrite_without_upsert(isolated_storage) -> None:
    isolated_storage.upload(storage_service.AVATARS, "u1/u1.png", b"one")
    with pytest.raises(StorageError):
        isolated_storage.upload(storage_service.AVATARS, "u1/u1.png", b"two")

    isolated_storage.upload(storage_service.AVATARS, "u1/u1.png", b"two", upsert=True)
    assert isolated_storage.download(storage_service.AVATARS, "u1/u1.png") == b"two"


def test_path_traversal_rejected(isolated_storage) -> None:
    with pytest.raises(StorageError):
        isolated_storage.upload(storage_service.AVATARS, "../escape.txt", b"x")


def test_unknown_bucket_rejected(isolated_storage) -> None:
    with pytest.raises(StorageError):
        isolated_storage.list("secrets")


def test_list_hides_placeholder(isolated_storage) -> None:
    isolated_storage.upload(storage_service.MESSAGE_ATTACHMENTS, f"temp/{storage_service.PLACEHOLDER_NAME}", b"")
    isolated_storage.upload(storage_service.MESSAGE_ATTACHMENTS, "temp/a.txt", b"a")
    assert [obj.name for obj in isolated_storage.list(storage_service.MESSAGE_ATTACHMENTS, "temp")] == ["a.txt"]


def test_move_relocates_object(isolated_storage) -> None:
    isolated_storage.upload(storage_service.MESSAGE_ATTACHMENTS, "temp/abc", b"data")
    moved = isolated_storage.move(storage_service.MESSAGE_ATTACHMENTS, "temp/abc", "msg1/abc")
    assert moved.path == "msg1/abc"
    with pytest.raises(ObjectNotFoundError):
        isolated_storage.download(storage_service.MESSAGE_ATTACHMENTS, "temp/abc")


def test_signed_token_round_trip(isolated_storage) -> None:
    isolated_storage.upload(storage_service.DOCUMENT_ATTACHMENTS, "documents/d1/file.pdf", b"%PDF")
    token = isolated_storage.create_signed_token(storage_service.DOCUMENT_ATTACHMENTS, "documents/d1/file.pdf", 60)
    assert isolated_storage.resolve_signed_token(token) == (
        storage_service.DOCUMENT_ATTACHMENTS,
        "documents/d1/file.pdf",
    )
    with pytest.raises(StorageError):
        isolated_storage.resolve_signed_token("not-a-token")


def test_public_url_only_for_public_buckets(isolated_storage) -> None:
    assert isolated_storage.public_url(storage_service.AVATARS, "u1/u1.png").endswith("/avatars/u1/u1.png")
    with pytest.raises(StorageError):
        isolated_storage.public_url(storage_service.DOCUMENT_ATTACHMENTS, "documents/d1/file.pdf")
