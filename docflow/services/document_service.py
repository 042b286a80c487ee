"""Persistence for the document workflow.

Every transition is computed by ``docflow.services.lifecycle`` on an
immutable snapshot of the row, then written back with a conditional UPDATE
that only matches if the row's ``revision`` counter is still the one it was
read with. Every write bumps the counter, so of two overlapping writers the
second fails with ``ConcurrentModificationError`` instead of silently
overwriting the first.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.core.exceptions import ConcurrentModificationError, NotFoundError
from docflow.models.nosql.activity import ActivityType
from docflow.models.sql.document import Document
from docflow.models.sql.template import Template
from docflow.models.sql.user import User
from docflow.services import lifecycle, pdf_service
from docflow.services.activity_service import record_activity
from docflow.services.classifier import content_to_text
from docflow.services.lifecycle import DocumentPatch, DocumentState, DocumentStatus, Principal

logger = logging.getLogger(__name__)


def to_state(doc: Document) -> DocumentState:
    """Read the workflow-relevant columns of a row into a ``DocumentState``."""
    return DocumentState(
        title=doc.title,
        content=doc.content,
        created_by=doc.created_by,
        status=DocumentStatus(doc.status),
        version=doc.version,
        metadata=dict(doc.meta or {}),
        previous_versions=tuple(doc.previous_versions or ()),
        updated_by=doc.updated_by,
        updated_at=doc.updated_at,
        approved_by=doc.approved_by,
        approval_date=doc.approval_date,
        rejection_reason=doc.rejection_reason,
        pdf_url=doc.pdf_url,
        revision=doc.revision,
    )


def build_search_text(title: str, content: Any, metadata: dict[str, Any]) -> str:
    """Lower-cased, tag-free text used by list search."""
    parts = [title or ""]
    for key in ("documentNumber", "department", "category"):
        if metadata.get(key):
            parts.append(str(metadata[key]))
    tags = metadata.get("tags")
    if isinstance(tags, list):
        parts.append(" ".join(str(tag) for tag in tags))
    parts.append(content_to_text(content))
    return " ".join(" ".join(parts).split()).lower()


async def next_document_number(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """``DOC-YYYY-MM-NNNN`` where NNNN counts this month's documents."""
    now = now or datetime.now(UTC)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    count = (
        await db.execute(select(func.count(Document.id)).where(Document.created_at >= month_start))
    ).scalar() or 0
    return f"DOC-{now.year}-{now.month:02d}-{count + 1:04d}"


async def get_template(db: AsyncSession, template_id: UUID) -> Template:
    """Fetch an active template."""
    result = await db.execute(
        select(Template).where(Template.id == template_id, Template.is_active.is_(True))
    )
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Template not found")
    return template


async def get_document(db: AsyncSession, document_id: UUID) -> Document:
    result = await db.execute(select(Document).where(Document.id == document_id))
    doc = result.scalar_one_or_none()
    if doc is None:
        raise NotFoundError("Document not found")
    return doc


async def _commit(db: AsyncSession, doc: Document, before: DocumentState, after: DocumentState) -> None:
    """Write ``after`` only if no other write has landed since ``before`` was read."""
    values = {
        Document.title: after.title,
        Document.content: after.content,
        Document.meta: after.metadata,
        Document.status: after.status.value,
        Document.version: after.version,
        Document.previous_versions: list(after.previous_versions),
        Document.updated_by: after.updated_by,
        Document.approved_by: after.approved_by,
        Document.approval_date: after.approval_date,
        Document.rejection_reason: after.rejection_reason,
        Document.pdf_url: after.pdf_url,
        Document.search_text: build_search_text(after.title, after.content, after.metadata),
        Document.revision: before.revision + 1,
    }
    if after.updated_at != before.updated_at:
        values[Document.updated_at] = after.updated_at

    stmt = (
        update(Document)
        .where(Document.id == doc.id, Document.revision == before.revision)
        .values(values)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount != 1:
        raise ConcurrentModificationError("Document was modified by another request, reload and retry")
    await db.refresh(doc)


async def create_document(
    db: AsyncSession,
    user: User,
    title: str,
    template_id: UUID,
    content: Any,
    metadata: Optional[dict[str, Any]] = None,
) -> Document:
    """Create a draft document from an active template."""
    principal = Principal.from_user(user)
    template = await get_template(db, template_id)

    metadata = dict(metadata or {})
    metadata["department"] = metadata.get("department") or user.department
    metadata.setdefault("category", template.category)
    metadata.setdefault("tags", [])
    metadata["documentNumber"] = await next_document_number(db)

    state = lifecycle.new_document(title, content, principal, metadata)
    doc = Document(
        title=state.title,
        template_id=template.id,
        content=state.content,
        meta=state.metadata,
        status=state.status.value,
        version=state.version,
        previous_versions=[],
        created_by=principal.id,
        updated_by=principal.id,
        search_text=build_search_text(state.title, state.content, state.metadata),
    )
    db.add(doc)
    await db.flush()
    await db.refresh(doc)

    logger.info("Document %s created by %s", doc.id, principal.id)
    await record_activity(
        ActivityType.CREATED, doc.id, principal.id, to_status=doc.status, version=doc.version
    )
    return doc


async def list_documents(
    db: AsyncSession,
    user: User,
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
) -> tuple[list[Document], int]:
    """Page through documents visible to ``user``; administrators see everything."""
    query = select(Document)
    if not user.is_admin:
        query = query.where(Document.created_by == user.id)
    if status:
        query = query.where(Document.status == status)
    if category:
        query = query.where(Document.meta["category"].as_string() == category)
    if department:
        query = query.where(Document.meta["department"].as_string() == department)
    if search and search.strip():
        term = search.strip().lower()
        query = query.where(
            or_(
                func.lower(Document.title).contains(term, autoescape=True),
                Document.search_text.contains(term, autoescape=True),
            )
        )

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0

    query = query.order_by(Document.created_at.desc()).offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def read_document(db: AsyncSession, user: User, document_id: UUID) -> Document:
    doc = await get_document(db, document_id)
    lifecycle.check_read(to_state(doc), Principal.from_user(user))
    return doc


async def update_document(
    db: AsyncSession,
    user: User,
    document_id: UUID,
    patch: DocumentPatch,
) -> Document:
    """Edit a document; edits past draft archive the current version first."""
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    before = to_state(doc)
    after = lifecycle.apply_edit(before, patch, principal)
    await _commit(db, doc, before, after)

    logger.info(
        "Document %s edited by %s (%s v%d -> %s v%d)",
        doc.id,
        principal.id,
        before.status.value,
        before.version,
        after.status.value,
        after.version,
    )
    await record_activity(
        ActivityType.UPDATED,
        doc.id,
        principal.id,
        from_status=before.status.value,
        to_status=after.status.value,
        version=after.version,
    )
    return doc


async def submit_document(db: AsyncSession, user: User, document_id: UUID) -> Document:
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    before = to_state(doc)
    after = lifecycle.apply_submit(before, principal)
    await _commit(db, doc, before, after)

    logger.info("Document %s submitted for approval by %s", doc.id, principal.id)
    await record_activity(
        ActivityType.SUBMITTED,
        doc.id,
        principal.id,
        from_status=before.status.value,
        to_status=after.status.value,
        version=after.version,
    )
    return doc


async def approve_document(db: AsyncSession, user: User, document_id: UUID) -> Document:
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    before = to_state(doc)
    after = lifecycle.apply_approve(before, principal)
    await _commit(db, doc, before, after)

    logger.info("Document %s approved by %s", doc.id, principal.id)
    await record_activity(
        ActivityType.APPROVED,
        doc.id,
        principal.id,
        from_status=before.status.value,
        to_status=after.status.value,
        version=after.version,
    )
    return doc


async def reject_document(
    db: AsyncSession, user: User, document_id: UUID, reason: Optional[str]
) -> Document:
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    before = to_state(doc)
    after = lifecycle.apply_reject(before, principal, reason)
    await _commit(db, doc, before, after)

    logger.info("Document %s rejected by %s", doc.id, principal.id)
    await record_activity(
        ActivityType.REJECTED,
        doc.id,
        principal.id,
        from_status=before.status.value,
        to_status=after.status.value,
        version=after.version,
        reason=after.rejection_reason,
    )
    return doc


async def delete_document(db: AsyncSession, user: User, document_id: UUID) -> None:
    """Delete the row, then the rendered PDF if there is one.

    The file is only removed once the delete has committed.
    """
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    state = to_state(doc)
    lifecycle.check_delete(state, principal)

    await db.delete(doc)
    await db.commit()
    pdf_service.remove_pdf(state.pdf_url)

    logger.info("Document %s deleted by %s", document_id, principal.id)
    await record_activity(
        ActivityType.DELETED,
        document_id,
        principal.id,
        from_status=state.status.value,
        version=state.version,
    )


async def _user_name(db: AsyncSession, user_id: Optional[UUID]) -> Optional[str]:
    if user_id is None:
        return None
    return (await db.execute(select(User.name).where(User.id == user_id))).scalar_one_or_none()


async def export_pdf(db: AsyncSession, user: User, document_id: UUID) -> Document:
    """Render the document with its template's layout and point ``pdf_url`` at the file."""
    principal = Principal.from_user(user)
    doc = await get_document(db, document_id)
    before = to_state(doc)
    lifecycle.check_read(before, principal)

    template = None
    if doc.template_id is not None:
        template = await db.get(Template, doc.template_id)

    data = pdf_service.render_document_pdf(
        title=before.title,
        content=before.content,
        template=template,
        document_number=before.metadata.get("documentNumber"),
        status=before.status.value,
        author_name=await _user_name(db, before.created_by),
        approver_name=await _user_name(db, before.approved_by),
        approval_date=before.approval_date.strftime("%d %B %Y") if before.approval_date else None,
    )
    pdf_url = pdf_service.store_pdf(data, before.metadata.get("documentNumber") or str(doc.id))

    after = lifecycle.apply_pdf_export(before, principal, pdf_url)
    try:
        await _commit(db, doc, before, after)
    except ConcurrentModificationError:
        pdf_service.remove_pdf(pdf_url)
        raise

    logger.info("PDF for document %s written to %s", doc.id, pdf_url)
    await record_activity(
        ActivityType.PDF_GENERATED,
        doc.id,
        principal.id,
        version=after.version,
        pdf_url=pdf_url,
    )
    return doc
