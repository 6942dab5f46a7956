# src/drystore_hub/api/v1/endpoints/knowledge_base.py
"""Knowledge-base category endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from drystore_hub.models import DocumentCategory
from drystore_hub.schemas.content import CategoryCreate, CategoryResponse, CategoryUpdate
from drystore_hub.services import documents as document_service

from ..dependencies import AdminUserDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/knowledge-base", tags=["knowledge-base"])


def _get_category_or_404(db: SessionDep, category_id: str) -> DocumentCategory:
    category = document_service.get_category(db, category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(_current_user: CurrentUserDep, db: SessionDep) -> list[DocumentCategory]:
    return list(document_service.list_categories(db))


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, _admin_user: AdminUserDep, db: SessionDep) -> DocumentCategory:
    try:
        return document_service.create_category(db, payload.model_dump())
    except document_service.DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    _admin_user: AdminUserDep,
    db: SessionDep,
) -> DocumentCategory:
    category = _get_category_or_404(db, category_id)
    try:
        return document_service.update_category(db, category, payload.model_dump(exclude_unset=True))
    except document_service.DocumentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, _admin_user: AdminUserDep, db: SessionDep) -> None:
    document_service.delete_category(db, _get_category_or_404(db, category_id))
