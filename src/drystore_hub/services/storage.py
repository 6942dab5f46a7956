"""Bucket-scoped object storage on the local filesystem.

Each bucket is a directory under ``settings.storage_root``. Object paths are
relative POSIX paths inside the bucket; anything escaping the bucket is
rejected. Signed URLs carry a short-lived JWT naming the bucket and path.
"""

from __future__ import annotations

import logging
import mimetypes
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path, PurePosixPath

from jose import JWTError, jwt

from drystore_hub.core.settings import settings

logger = logging.getLogger(__name__)

AVATARS = "avatars"
MESSAGE_ATTACHMENTS = "message_attachments"
DOCUMENT_ATTACHMENTS = "document_attachments"
ANNOUNCEMENTS = "announcements"

BUCKETS = frozenset({AVATARS, MESSAGE_ATTACHMENTS, DOCUMENT_ATTACHMENTS, ANNOUNCEMENTS})
PUBLIC_BUCKETS = frozenset({AVATARS, ANNOUNCEMENTS})
PLACEHOLDER_NAME = ".emptyFolderPlaceholder"
SIGNED_URL_SCOPE = "storage"


class StorageError(ValueError):
    """Raised for invalid storage operations."""


class ObjectNotFoundError(StorageError):
    """Raised when an object does not exist."""


@dataclass(frozen=True)
class StoredObject:
    """Metadata about a stored blob."""

    bucket: str
    path: str
    name: str
    size: int
    content_type: str
    created_at: datetime


class ObjectStorage:
    """Filesystem-backed implementation of the storage interface."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _bucket_dir(self, bucket: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        return self.root / bucket

    def _resolve(self, bucket: str, path: str) -> Path:
        relative = PurePosixPath(path.strip("/"))
        if not relative.parts or any(part in {"..", "."} for part in relative.parts):
            raise StorageError(f"Invalid object path: {path!r}")
        return self._bucket_dir(bucket).joinpath(*relative.parts)

    def _describe(self, bucket: str, path: str, target: Path) -> StoredObject:
        stat = target.stat()
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        return StoredObject(
            bucket=bucket,
            path=path.strip("/"),
            name=target.name,
            size=stat.st_size,
            content_type=content_type,
            created_at=datetime.fromtimestamp(stat.st_mtime, UTC),
        )

    def upload(self, bucket: str, path: str, data: bytes, *, upsert: bool = False) -> StoredObject:
        """Write ``data`` to ``bucket/path``."""
        target = self._resolve(bucket, path)
        if target.exists() and not upsert:
            raise StorageError(f"Object already exists: {bucket}/{path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug("Stored %d bytes at %s/%s", len(data), bucket, path)
        return self._describe(bucket, path, target)

    def download(self, bucket: str, path: str) -> bytes:
        """Return the bytes stored at ``bucket/path``."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise ObjectNotFoundError(f"Object not found: {bucket}/{path}")
        return target.read_bytes()

    def local_path(self, bucket: str, path: str) -> Path:
        """Return the file backing ``bucket/path`` for streaming responses."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise ObjectNotFoundError(f"Object not found: {bucket}/{path}")
        return target

    def stat(self, bucket: str, path: str) -> StoredObject:
        """Return metadata for a single object."""
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise ObjectNotFoundError(f"Object not found: {bucket}/{path}")
        return self._describe(bucket, path, target)

    def list(self, bucket: str, prefix: str = "") -> list[StoredObject]:
        """List objects directly under ``prefix``, oldest first."""
        directory = self._resolve(bucket, prefix) if prefix.strip("/") else self._bucket_dir(bucket)
        if not directory.is_dir():
            return []
        base = prefix.strip("/")
        objects = [
            self._describe(bucket, f"{base}/{entry.name}" if base else entry.name, entry)
            for entry in directory.iterdir()
            if entry.is_file() and entry.name != PLACEHOLDER_NAME
        ]
        return sorted(objects, key=lambda obj: (obj.created_at, obj.name))

    def remove(self, bucket: str, paths: list[str]) -> list[str]:
        """Delete objects; returns the paths that existed."""
        removed: list[str] = []
        for path in paths:
            target = self._resolve(bucket, path)
            if target.is_file():
                target.unlink()
                removed.append(path)
        return removed

    def move(self, bucket: str, source: str, destination: str) -> StoredObject:
        """Rename an object inside a bucket."""
        src = self._resolve(bucket, source)
        if not src.is_file():
            raise ObjectNotFoundError(f"Object not found: {bucket}/{source}")
        dst = self._resolve(bucket, destination)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        return self._describe(bucket, destination, dst)

    def public_url(self, bucket: str, path: str) -> str:
        """Return the unauthenticated URL for objects in public buckets."""
        if bucket not in PUBLIC_BUCKETS:
            raise StorageError(f"Bucket {bucket} is not public")
        self._resolve(bucket, path)
        return f"{settings.storage_public_base_url}/{bucket}/{path.strip('/')}"

    def create_signed_token(self, bucket: str, path: str, expires_in: int | None = None) -> str:
        """Return a token granting temporary read access to one object."""
        self.stat(bucket, path)
        seconds = expires_in or settings.signed_url_expire_seconds
        claims = {
            "scope": SIGNED_URL_SCOPE,
            "bucket": bucket,
            "path": path.strip("/"),
            "exp": datetime.now(UTC) + timedelta(seconds=seconds),
        }
        return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)

    def resolve_signed_token(self, token: str) -> tuple[str, str]:
        """Return ``(bucket, path)`` for a valid signed token."""
        try:
            claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        except JWTError as err:
            raise StorageError("Invalid or expired signed URL") from err
        if claims.get("scope") != SIGNED_URL_SCOPE:
            raise StorageError("Invalid or expired signed URL")
        return str(claims["bucket"]), str(claims["path"])


_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    """Return the process-wide storage backend."""
    global _storage
    if _storage is None:
        _storage = ObjectStorage(settings.storage_root)
    return _storage
