"""Knowledge-base documents, their attachments and categories.

Each save increments ``Document.version``. Writers send the version they
loaded; the update is applied with a conditional ``UPDATE ... WHERE
version = :expected`` so concurrent saves cannot silently overwrite each
other.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Sequence
from typing import Any

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from drystore_hub.db.time import utcnow
from drystore_hub.models import Document, DocumentCategory, User

from . import storage as storage_service
from .change_feed import ChangeType, publish_change

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT: dict[str, Any] = {"type": "doc", "content": []}
MAX_ATTACHMENT_BYTES = 25 * 1024 * 1024
ALLOWED_ATTACHMENT_EXTENSIONS = frozenset(
    {
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".rar", ".7z", ".txt", ".png", ".jpg", ".jpeg", ".gif", ".webp",
    }
)
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class DocumentError(ValueError):
    """Raised for invalid document operations."""


class VersionConflictError(DocumentError):
    """Raised when a save was based on an outdated version."""

    def __init__(self, expected: int, current: int) -> None:
        super().__init__(f"Document was modified (expected version {expected}, current {current})")
        self.expected = expected
        self.current = current


def can_edit(document: Document, user: User) -> bool:
    return document.created_by == user.id or user.is_admin


def can_view(document: Document, user: User) -> bool:
    return document.is_public or can_edit(document, user)


def list_documents(
    db: Session,
    user: User,
    *,
    category: str | None = None,
    search: str | None = None,
) -> Sequence[Document]:
    """Return public documents plus the user's own, most recently updated first."""
    query = db.query(Document)
    if not user.is_admin:
        query = query.filter(or_(Document.is_public.is_(True), Document.created_by == user.id))
    if category:
        query = query.filter(Document.category == category)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Document.title.ilike(pattern), Document.category.ilike(pattern)))
    return query.order_by(Document.updated_at.desc()).all()


def get_document(db: Session, document_id: str) -> Document | None:
    return db.query(Document).filter(Document.id == document_id).first()


def create_document(db: Session, author: User, data: dict[str, Any]) -> Document:
    title = (data.get("title") or "").strip()
    if not title:
        raise DocumentError("Document title is required")
    document = Document(
        title=title,
        content=data.get("content") or dict(EMPTY_DOCUMENT),
        category=data.get("category") or None,
        is_public=bool(data.get("is_public", True)),
        tags=list(data.get("tags") or []),
        version=1,
        created_by=author.id,
        last_modified_by=author.id,
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    publish_change("documents", ChangeType.INSERT, document)
    return document


def update_document(
    db: Session,
    editor: User,
    document: Document,
    expected_version: int,
    changes: dict[str, Any],
) -> Document:
    """Apply ``changes`` if the stored version still equals ``expected_version``.

    Raises:
        VersionConflictError: If another save landed first.
    """
    values: dict[str, Any] = {
        key: value
        for key, value in changes.items()
        if key in {"title", "content", "category", "is_public", "tags"}
    }
    if "title" in values:
        values["title"] = (values["title"] or "").strip()
        if not values["title"]:
            raise DocumentError("Document title is required")
    values.update(
        version=Document.version + 1,
        last_modified_by=editor.id,
        updated_at=utcnow(),
    )
    result = db.execute(
        update(Document)
        .where(Document.id == document.id, Document.version == expected_version)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.refresh(document)
        raise VersionConflictError(expected_version, document.version)
    db.commit()
    db.refresh(document)
    publish_change("documents", ChangeType.UPDATE, document)
    return document


def delete_document(db: Session, document: Document) -> None:
    storage = storage_service.get_storage()
    paths = [obj.path for obj in storage.list(storage_service.DOCUMENT_ATTACHMENTS, attachment_prefix(document.id))]
    if paths:
        storage.remove(storage_service.DOCUMENT_ATTACHMENTS, paths)
    snapshot = {
        "id": document.id,
        "title": document.title,
        "is_public": document.is_public,
        "created_by": document.created_by,
    }
    db.delete(document)
    db.commit()
    publish_change("documents", ChangeType.DELETE, snapshot)


def attachment_prefix(document_id: str) -> str:
    return f"documents/{document_id}"


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename)


def upload_attachment(document: Document, filename: str, data: bytes) -> storage_service.StoredObject:
    """Store an attachment under the document's folder with a timestamp prefix."""
    if len(data) > MAX_ATTACHMENT_BYTES:
        raise DocumentError("Attachment exceeds the 25MB limit")
    extension = "." + filename.lower().rsplit(".", 1)[-1] if "." in filename else ""
    if extension not in ALLOWED_ATTACHMENT_EXTENSIONS:
        raise DocumentError("File type not allowed")
    name = f"{int(time.time() * 1000)}_{sanitize_filename(filename)}"
    return storage_service.get_storage().upload(
        storage_service.DOCUMENT_ATTACHMENTS,
        f"{attachment_prefix(document.id)}/{name}",
        data,
    )


def list_attachments(document: Document) -> list[storage_service.StoredObject]:
    return storage_service.get_storage().list(
        storage_service.DOCUMENT_ATTACHMENTS,
        attachment_prefix(document.id),
    )


def remove_attachment(document: Document, filename: str) -> bool:
    removed = storage_service.get_storage().remove(
        storage_service.DOCUMENT_ATTACHMENTS,
        [f"{attachment_prefix(document.id)}/{filename}"],
    )
    return bool(removed)


def attachment_token(document: Document, filename: str, expires_in: int = 60) -> str:
    return storage_service.get_storage().create_signed_token(
        storage_service.DOCUMENT_ATTACHMENTS,
        f"{attachment_prefix(document.id)}/{filename}",
        expires_in=expires_in,
    )


def list_categories(db: Session) -> Sequence[DocumentCategory]:
    return db.query(DocumentCategory).order_by(DocumentCategory.name).all()


def get_category(db: Session, category_id: str) -> DocumentCategory | None:
    return db.query(DocumentCategory).filter(DocumentCategory.id == category_id).first()


def _check_category_name(db: Session, name: Any, exclude_id: str | None = None) -> str:
    name = (name or "").strip()
    if not name:
        raise DocumentError("Category name is required")
    query = db.query(DocumentCategory).filter(DocumentCategory.name == name)
    if exclude_id is not None:
        query = query.filter(DocumentCategory.id != exclude_id)
    if query.first():
        raise DocumentError("A category with this name already exists")
    return name


def create_category(db: Session, data: dict[str, Any]) -> DocumentCategory:
    name = _check_category_name(db, data.get("name"))
    category = DocumentCategory(name=name, description=data.get("description"), color=data.get("color"))
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category: DocumentCategory, data: dict[str, Any]) -> DocumentCategory:
    if "name" in data:
        data = {**data, "name": _check_category_name(db, data["name"], exclude_id=category.id)}
    for key, value in data.items():
        setattr(category, key, value)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: DocumentCategory) -> None:
    db.delete(category)
    db.commit()
