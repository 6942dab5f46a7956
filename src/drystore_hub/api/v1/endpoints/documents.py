# src/drystore_hub/api/v1/endpoints/documents.py
"""Document, read-confirmation and attachment endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status

from drystore_hub.models import Document, User
from drystore_hub.schemas.content import (
    AttachmentResponse,
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
    MarkDocumentReadRequest,
    ReadStatusResponse,
    SignedUrlResponse,
)
from drystore_hub.services import documents as document_service
from drystore_hub.services import read_tracking
from drystore_hub.services.storage import StorageError

from ..dependencies import CurrentUserDep, SessionDep
from .storage import signed_url_for

router = APIRouter(prefix="/documents", tags=["documents"])

SIGNED_URL_SECONDS = 60


def _get_document_or_404(db: SessionDep, document_id: str, user: User) -> Document:
    document = document_service.get_document(db, document_id)
    if document is None or not document_service.can_view(document, user):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


def _ensure_editor(document: Document, user: User) -> None:
    if not document_service.can_edit(document, user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author or an administrator can change this document",
        )


@router.get("/", response_model=list[DocumentResponse])
async def list_documents(
    current_user: CurrentUserDep,
    db: SessionDep,
    category: str | None = Query(None),
    search: str | None = Query(None),
) -> list[Document]:
    """List visible documents, most recently updated first."""
    return list(document_service.list_documents(db, current_user, category=category, search=search))


@router.post("/", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(payload: DocumentCreate, current_user: CurrentUserDep, db: SessionDep) -> Document:
    """Create a document at version 1."""
    try:
        return document_service.create_document(db, current_user, payload.model_dump())
    except document_service.DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> Document:
    return _get_document_or_404(db, document_id, current_user)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    payload: DocumentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> Document:
    """Save changes; rejected with 409 when ``expected_version`` is stale."""
    document = _get_document_or_404(db, document_id, current_user)
    _ensure_editor(document, current_user)
    changes = payload.model_dump(exclude_unset=True, exclude={"expected_version"})
    try:
        return document_service.update_document(
            db, current_user, document, payload.expected_version, changes
        )
    except document_service.VersionConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except document_service.DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> None:
    document = _get_document_or_404(db, document_id, current_user)
    _ensure_editor(document, current_user)
    document_service.delete_document(db, document)


@router.post("/{document_id}/read", response_model=ReadStatusResponse)
async def mark_read(
    document_id: str,
    payload: MarkDocumentReadRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReadStatusResponse:
    """Record that the document was opened, optionally confirming it."""
    _get_document_or_404(db, document_id, current_user)
    try:
        read_tracking.mark_document_read(db, current_user.id, document_id, confirmed=payload.confirmed)
    except read_tracking.ReadGateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    status_ = read_tracking.get_document_read_status(db, current_user.id, document_id)
    return ReadStatusResponse(**asdict(status_))


@router.post("/{document_id}/scroll-complete", response_model=ReadStatusResponse)
async def scroll_complete(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> ReadStatusResponse:
    """Record that the reader reached the end of the document."""
    _get_document_or_404(db, document_id, current_user)
    read_tracking.record_scroll_complete(db, current_user.id, document_id)
    status_ = read_tracking.get_document_read_status(db, current_user.id, document_id)
    return ReadStatusResponse(**asdict(status_))


@router.post("/{document_id}/confirm-read", response_model=ReadStatusResponse)
async def confirm_read(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> ReadStatusResponse:
    """Confirm the document was read; requires a prior scroll-complete."""
    _get_document_or_404(db, document_id, current_user)
    try:
        read_tracking.confirm_document_read(db, current_user.id, document_id)
    except read_tracking.ReadGateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    status_ = read_tracking.get_document_read_status(db, current_user.id, document_id)
    return ReadStatusResponse(**asdict(status_))


@router.get("/{document_id}/read-status", response_model=ReadStatusResponse)
async def read_status(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> ReadStatusResponse:
    _get_document_or_404(db, document_id, current_user)
    status_ = read_tracking.get_document_read_status(db, current_user.id, document_id)
    return ReadStatusResponse(**asdict(status_))


@router.get("/{document_id}/attachments", response_model=list[AttachmentResponse])
async def list_attachments(document_id: str, current_user: CurrentUserDep, db: SessionDep) -> list[AttachmentResponse]:
    document = _get_document_or_404(db, document_id, current_user)
    return [AttachmentResponse.model_validate(obj) for obj in document_service.list_attachments(document)]


@router.post(
    "/{document_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachment(
    document_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    file: UploadFile = File(...),
) -> AttachmentResponse:
    """Attach a file (max 25MB, office/archive/image types)."""
    document = _get_document_or_404(db, document_id, current_user)
    _ensure_editor(document, current_user)
    data = await file.read()
    try:
        stored = document_service.upload_attachment(document, file.filename or "file", data)
    except (document_service.DocumentError, StorageError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AttachmentResponse.model_validate(stored)


@router.delete("/{document_id}/attachments/{filename}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_attachment(
    document_id: str,
    filename: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    document = _get_document_or_404(db, document_id, current_user)
    _ensure_editor(document, current_user)
    try:
        removed = document_service.remove_attachment(document, filename)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")


@router.get("/{document_id}/attachments/{filename}/url", response_model=SignedUrlResponse)
async def attachment_url(
    document_id: str,
    filename: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> SignedUrlResponse:
    """Return a short-lived download link for an attachment."""
    document = _get_document_or_404(db, document_id, current_user)
    try:
        token = document_service.attachment_token(document, filename, expires_in=SIGNED_URL_SECONDS)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return SignedUrlResponse(signed_url=signed_url_for(token), expires_in=SIGNED_URL_SECONDS)
