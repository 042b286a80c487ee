"""Document schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, Field

from docflow.schemas.base import CamelModel


class DocumentCreate(CamelModel):
    """Schema for creating a document from a template."""

    title: str = Field(..., min_length=1, max_length=500)
    template_id: UUID
    content: Any = Field(...)
    metadata: dict[str, Any] | None = None


class DocumentUpdate(CamelModel):
    """Partial update; omitted fields keep their current value."""

    title: str | None = Field(None, max_length=500)
    content: Any = None
    metadata: dict[str, Any] | None = None


class RejectRequest(CamelModel):
    reason: str | None = None


class VersionSnapshot(CamelModel):
    """An archived version of a document's content."""

    version: int
    content: Any
    updated_at: datetime | None = None
    updated_by: UUID | None = None
    pdf_url: str | None = None


class DocumentResponse(CamelModel):
    """Schema for document response."""

    id: UUID
    title: str
    template_id: UUID | None = None
    content: Any
    # The ORM attribute is ``meta``; the wire name stays ``metadata``
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )
    status: str
    version: int
    previous_versions: list[VersionSnapshot] = Field(default_factory=list)
    created_by: UUID
    updated_by: UUID | None = None
    approved_by: UUID | None = None
    approval_date: datetime | None = None
    rejection_reason: str | None = None
    pdf_url: str | None = None
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(CamelModel):
    """Schema for paginated document list."""

    items: list[DocumentResponse]
    total: int
    page: int
    limit: int
    pages: int


class PdfResponse(CamelModel):
    success: bool = True
    pdf_url: str


class ActivityResponse(CamelModel):
    """One entry of a document's activity trail."""

    event_type: str
    actor_id: str
    from_status: str | None = None
    to_status: str | None = None
    version: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
