"""Document approval state machine.

The transition rules are pure functions over an immutable ``DocumentState``:
each takes the current state, the acting principal and the operation's
arguments, and either returns the next state or raises a domain error. The
input state is never modified, so a failed operation leaves nothing to undo.

Legal status edges::

    draft ----submit----> pending ----approve----> approved (terminal)
      ^                      |
      |                    reject
      |                      v
      +-------edit------- rejected ----submit----> pending

Persisting a transition (and guarding it against concurrent writers) is the
job of ``docflow.services.document_service``.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from docflow.core.exceptions import (
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
)


class DocumentStatus(str, Enum):
    """Workflow status of a document."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.DRAFT: frozenset({DocumentStatus.PENDING}),
    DocumentStatus.PENDING: frozenset({DocumentStatus.APPROVED, DocumentStatus.REJECTED}),
    DocumentStatus.REJECTED: frozenset({DocumentStatus.DRAFT, DocumentStatus.PENDING}),
    DocumentStatus.APPROVED: frozenset(),
}


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    """Return True if ``current -> target`` is an edge of the workflow graph."""
    return target in TRANSITIONS[current]


@dataclass(frozen=True)
class Principal:
    """The identity an operation is performed as."""

    id: UUID
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: Any) -> "Principal":
        return cls(id=user.id, is_admin=user.is_admin)


@dataclass(frozen=True)
class DocumentPatch:
    """Partial update; ``None`` means "keep the current value"."""

    title: str | None = None
    content: Any = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class DocumentState:
    """The workflow-relevant view of a document."""

    title: str
    content: Any
    created_by: UUID
    status: DocumentStatus = DocumentStatus.DRAFT
    version: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    previous_versions: tuple[dict[str, Any], ...] = ()
    updated_by: UUID | None = None
    updated_at: datetime | None = None
    approved_by: UUID | None = None
    approval_date: datetime | None = None
    rejection_reason: str | None = None
    pdf_url: str | None = None
    # Bumped by every persisted write; guards against writes based on a stale read
    revision: int = 0

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready record of this version, appended to the history on re-edit."""
        return {
            "version": self.version,
            "content": self.content,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "updated_by": str(self.updated_by or self.created_by),
            "pdf_url": self.pdf_url,
        }


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(UTC)


def _is_owner(state: DocumentState, principal: Principal) -> bool:
    return principal.id == state.created_by


def _require_owner_or_admin(state: DocumentState, principal: Principal, action: str) -> None:
    if not (principal.is_admin or _is_owner(state, principal)):
        raise PermissionDeniedError(f"Not authorized to {action} this document")


def _require_admin(principal: Principal, action: str) -> None:
    if not principal.is_admin:
        raise PermissionDeniedError(f"Only administrators can {action} documents")


def new_document(
    title: str,
    content: Any,
    owner: Principal,
    metadata: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> DocumentState:
    """Build the initial draft state for a new document."""
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if content is None:
        raise ValidationError("Content is required")

    return DocumentState(
        title=title.strip(),
        content=content,
        created_by=owner.id,
        metadata=dict(metadata or {}),
        updated_by=owner.id,
        updated_at=_now(now),
    )


def check_read(state: DocumentState, principal: Principal) -> None:
    """Owners and administrators may see a document."""
    _require_owner_or_admin(state, principal, "access")


def apply_edit(
    state: DocumentState,
    patch: DocumentPatch,
    principal: Principal,
    now: datetime | None = None,
) -> DocumentState:
    """Apply a partial update.

    Editing anything past draft archives the current version and bumps the
    version number; editing a rejected document also sends it back to draft.
    """
    _require_owner_or_admin(state, principal, "update")
    if not TRANSITIONS[state.status]:
        raise InvalidStateError(f"Cannot update an {state.status.value} document")
    if patch.title is not None and not patch.title.strip():
        raise ValidationError("Title cannot be empty")

    previous_versions = state.previous_versions
    version = state.version
    if state.status != DocumentStatus.DRAFT:
        previous_versions = previous_versions + (state.snapshot(),)
        version += 1

    status = state.status
    rejection_reason = state.rejection_reason
    if status != DocumentStatus.DRAFT and can_transition(status, DocumentStatus.DRAFT):
        status = DocumentStatus.DRAFT
        rejection_reason = None

    metadata = state.metadata
    if patch.metadata:
        metadata = {**state.metadata, **patch.metadata}

    return replace(
        state,
        title=patch.title.strip() if patch.title is not None else state.title,
        content=patch.content if patch.content is not None else state.content,
        metadata=metadata,
        status=status,
        version=version,
        previous_versions=previous_versions,
        rejection_reason=rejection_reason,
        updated_by=principal.id,
        updated_at=_now(now),
    )


def apply_submit(state: DocumentState, principal: Principal) -> DocumentState:
    """Send a draft (or a rejected document) for approval."""
    if not _is_owner(state, principal):
        raise PermissionDeniedError("Not authorized to submit this document")
    if not can_transition(state.status, DocumentStatus.PENDING):
        raise InvalidStateError(f"Document is already {state.status.value}")

    return replace(state, status=DocumentStatus.PENDING)


def apply_approve(
    state: DocumentState,
    principal: Principal,
    now: datetime | None = None,
) -> DocumentState:
    """Approve a pending document; approved documents are immutable."""
    _require_admin(principal, "approve")
    if not can_transition(state.status, DocumentStatus.APPROVED):
        raise InvalidStateError("Document is not pending approval")

    return replace(
        state,
        status=DocumentStatus.APPROVED,
        approved_by=principal.id,
        approval_date=_now(now),
    )


def apply_reject(state: DocumentState, principal: Principal, reason: str | None) -> DocumentState:
    """Reject a pending document with a reason shown to its owner."""
    _require_admin(principal, "reject")
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required")
    if not can_transition(state.status, DocumentStatus.REJECTED):
        raise InvalidStateError("Document is not pending approval")

    return replace(state, status=DocumentStatus.REJECTED, rejection_reason=reason.strip())


def check_delete(state: DocumentState, principal: Principal) -> None:
    """Owners and administrators may delete a document in any status."""
    _require_owner_or_admin(state, principal, "delete")


def apply_pdf_export(state: DocumentState, principal: Principal, pdf_url: str) -> DocumentState:
    """Point the document at a freshly rendered PDF."""
    _require_owner_or_admin(state, principal, "access")
    return replace(state, pdf_url=pdf_url)
