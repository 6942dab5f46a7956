# src/drystore_hub/api/v1/endpoints/storage.py
"""Object storage endpoints: uploads, listings, signed and public downloads."""

from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from drystore_hub.schemas.content import AttachmentResponse, SignedUrlResponse
from drystore_hub.services import storage as storage_service
from drystore_hub.services.storage import ObjectNotFoundError, StorageError, get_storage

from ..dependencies import CurrentUserDep

router = APIRouter(prefix="/storage", tags=["storage"])

API_PREFIX = "/api/v1"


class MoveRequest(BaseModel):
    source: str
    destination: str


def signed_url_for(token: str) -> str:
    return f"{API_PREFIX}/storage/signed/{token}"


def _ensure_writable(bucket: str, path: str, user_id: str) -> None:
    """Avatars live under ``{user_id}/``; staged message uploads under ``temp/``."""
    if bucket == storage_service.AVATARS and not path.startswith(f"{user_id}/"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot write another user's avatar")
    if bucket == storage_service.MESSAGE_ATTACHMENTS and not path.startswith("temp/"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Message attachments must be uploaded to temp/",
        )
    if bucket in {storage_service.DOCUMENT_ATTACHMENTS, storage_service.ANNOUNCEMENTS}:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Use the document or announcement endpoints for this bucket",
        )


@router.post("/{bucket}/upload", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_object(
    bucket: str,
    current_user: CurrentUserDep,
    path: str = Query(...),
    upsert: bool = Query(False),
    file: UploadFile = File(...),
) -> AttachmentResponse:
    _ensure_writable(bucket, path, current_user.id)
    data = await file.read()
    try:
        stored = get_storage().upload(bucket, path, data, upsert=upsert)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AttachmentResponse.model_validate(stored)


@router.get("/{bucket}/list", response_model=list[AttachmentResponse])
async def list_objects(
    bucket: str,
    _current_user: CurrentUserDep,
    prefix: str = Query(""),
) -> list[AttachmentResponse]:
    try:
        objects = get_storage().list(bucket, prefix)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return [AttachmentResponse.model_validate(obj) for obj in objects]


@router.post("/{bucket}/move", response_model=AttachmentResponse)
async def move_object(bucket: str, payload: MoveRequest, current_user: CurrentUserDep) -> AttachmentResponse:
    _ensure_writable(bucket, payload.source, current_user.id)
    try:
        stored = get_storage().move(bucket, payload.source, payload.destination)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AttachmentResponse.model_validate(stored)


@router.delete("/{bucket}/object", status_code=status.HTTP_204_NO_CONTENT)
async def remove_object(bucket: str, current_user: CurrentUserDep, path: str = Query(...)) -> None:
    _ensure_writable(bucket, path, current_user.id)
    try:
        removed = get_storage().remove(bucket, [path])
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")


@router.post("/{bucket}/sign", response_model=SignedUrlResponse)
async def sign_object(
    bucket: str,
    _current_user: CurrentUserDep,
    path: str = Query(...),
    expires_in: int = Query(60, ge=1, le=7 * 24 * 3600),
) -> SignedUrlResponse:
    """Issue a temporary download link."""
    try:
        token = get_storage().create_signed_token(bucket, path, expires_in=expires_in)
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SignedUrlResponse(signed_url=signed_url_for(token), expires_in=expires_in)


def _serve(bucket: str, path: str) -> FileResponse:
    storage = get_storage()
    try:
        meta = storage.stat(bucket, path)
        local = storage.local_path(bucket, path)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found") from exc
    # Header filenames must be ASCII
    safe_filename = meta.name.encode("ascii", "ignore").decode("ascii") or "download"
    return FileResponse(
        path=local,
        filename=safe_filename,
        media_type=meta.content_type,
        content_disposition_type="inline",
    )


@router.get("/signed/{token}")
async def download_signed(token: str) -> FileResponse:
    """Download an object using a signed token; no bearer token needed."""
    try:
        bucket, path = get_storage().resolve_signed_token(token)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return _serve(bucket, path)


@router.get("/public/{bucket}/{path:path}")
async def download_public(bucket: str, path: str) -> FileResponse:
    """Serve objects from public buckets."""
    if bucket not in storage_service.PUBLIC_BUCKETS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found")
    return _serve(bucket, path)
