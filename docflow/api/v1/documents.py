"""Document endpoints."""

from math import ceil
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.api.deps import get_current_user
from docflow.db.postgres import get_db
from docflow.models.sql.document import Document
from docflow.models.sql.user import User
from docflow.schemas.document import (
    ActivityResponse,
    DocumentCreate,
    DocumentListResponse,
    DocumentResponse,
    DocumentUpdate,
    PdfResponse,
    RejectRequest,
    VersionSnapshot,
)
from docflow.services import document_service, pdf_service
from docflow.services.activity_service import list_activity
from docflow.services.lifecycle import DocumentPatch, DocumentStatus

router = APIRouter()


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a document",
)
async def create_document(
    document_data: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    """Create a draft from a template. The document number is assigned here."""
    return await document_service.create_document(
        db,
        current_user,
        title=document_data.title,
        template_id=document_data.template_id,
        content=document_data.content,
        metadata=document_data.metadata,
    )


@router.get(
    "",
    response_model=DocumentListResponse,
    summary="List documents",
)
async def list_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[DocumentStatus] = Query(None, alias="status"),
    category: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    """Newest first. Non-administrators only see documents they created."""
    documents, total = await document_service.list_documents(
        db,
        current_user,
        page=page,
        limit=limit,
        status=status_filter.value if status_filter else None,
        category=category,
        department=department,
        search=search,
    )
    return DocumentListResponse(
        items=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        page=page,
        limit=limit,
        pages=ceil(total / limit) if total > 0 else 1,
    )


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Get a document",
)
async def get_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    return await document_service.read_document(db, current_user, document_id)


@router.put(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Update a document",
)
async def update_document(
    document_id: UUID,
    update_data: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    """Partial update. Editing a pending or rejected document archives the current version."""
    patch = DocumentPatch(
        title=update_data.title,
        content=update_data.content,
        metadata=update_data.metadata,
    )
    return await document_service.update_document(db, current_user, document_id, patch)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a document",
)
async def delete_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await document_service.delete_document(db, current_user, document_id)


@router.put(
    "/{document_id}/submit",
    response_model=DocumentResponse,
    summary="Submit a document for approval",
)
async def submit_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    return await document_service.submit_document(db, current_user, document_id)


@router.put(
    "/{document_id}/approve",
    response_model=DocumentResponse,
    summary="Approve a pending document",
)
async def approve_document(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    return await document_service.approve_document(db, current_user, document_id)


@router.put(
    "/{document_id}/reject",
    response_model=DocumentResponse,
    summary="Reject a pending document",
)
async def reject_document(
    document_id: UUID,
    reject_data: RejectRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Document:
    return await document_service.reject_document(
        db, current_user, document_id, reject_data.reason
    )


@router.post(
    "/{document_id}/pdf",
    response_model=PdfResponse,
    summary="Render the document as PDF",
)
async def generate_pdf(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PdfResponse:
    doc = await document_service.export_pdf(db, current_user, document_id)
    return PdfResponse(pdf_url=doc.pdf_url)


@router.get(
    "/{document_id}/pdf",
    summary="Download the rendered PDF",
)
async def download_pdf(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FileResponse:
    doc = await document_service.read_document(db, current_user, document_id)
    path = pdf_service.path_for_url(doc.pdf_url) if doc.pdf_url else None
    if path is None or not path.exists():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="PDF has not been generated for this document",
        )
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.get(
    "/{document_id}/versions",
    response_model=list[VersionSnapshot],
    summary="List archived versions",
)
async def list_versions(
    document_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[VersionSnapshot]:
    """Oldest first; the current version is the document itself."""
    doc = await document_service.read_document(db, current_user, document_id)
    return [VersionSnapshot.model_validate(snapshot) for snapshot in doc.previous_versions]


@router.get(
    "/{document_id}/activity",
    response_model=list[ActivityResponse],
    summary="Lifecycle activity trail",
)
async def get_activity(
    document_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ActivityResponse]:
    doc = await document_service.read_document(db, current_user, document_id)
    events = await list_activity(doc.id, limit=limit)
    return [ActivityResponse.model_validate(event) for event in events]
