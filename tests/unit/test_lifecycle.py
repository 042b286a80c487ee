"""Unit tests for the document approval state machine."""

from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from docflow.core.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from docflow.services import lifecycle
from docflow.services.lifecycle import (
    DocumentPatch,
    DocumentState,
    DocumentStatus,
    Principal,
    apply_approve,
    apply_edit,
    apply_pdf_export,
    apply_reject,
    apply_submit,
    can_transition,
    check_delete,
    check_read,
    new_document,
)

NOW = datetime(2024, 11, 5, 10, 30, tzinfo=UTC)


@pytest.fixture
def owner() -> Principal:
    return Principal(id=uuid4())


@pytest.fixture
def admin() -> Principal:
    return Principal(id=uuid4(), is_admin=True)


@pytest.fixture
def stranger() -> Principal:
    return Principal(id=uuid4())


@pytest.fixture
def draft(owner: Principal) -> DocumentState:
    return new_document("Exam circular", {"body": "<p>Exams start Monday</p>"}, owner, now=NOW)


def _pending(state: DocumentState, owner: Principal) -> DocumentState:
    return apply_submit(state, owner)


class TestTransitions:
    """Tests for the status graph."""

    def test_legal_edges(self):
        """Verify only the documented edges are allowed."""
        assert can_transition(DocumentStatus.DRAFT, DocumentStatus.PENDING)
        assert can_transition(DocumentStatus.PENDING, DocumentStatus.APPROVED)
        assert can_transition(DocumentStatus.PENDING, DocumentStatus.REJECTED)
        assert can_transition(DocumentStatus.REJECTED, DocumentStatus.DRAFT)
        assert can_transition(DocumentStatus.REJECTED, DocumentStatus.PENDING)

    def test_approved_is_terminal(self):
        """Verify nothing leaves approved."""
        for target in DocumentStatus:
            assert not can_transition(DocumentStatus.APPROVED, target)

    def test_draft_cannot_skip_review(self):
        """Verify a draft cannot be approved or rejected directly."""
        assert not can_transition(DocumentStatus.DRAFT, DocumentStatus.APPROVED)
        assert not can_transition(DocumentStatus.DRAFT, DocumentStatus.REJECTED)

    @pytest.mark.parametrize("status", list(DocumentStatus))
    def test_actions_follow_the_graph(
        self, status: DocumentStatus, draft: DocumentState, owner: Principal, admin: Principal
    ):
        """Verify submit, approve and reject succeed exactly where the graph has an edge."""
        state = replace(draft, status=status)
        actions = [
            (DocumentStatus.PENDING, lambda: apply_submit(state, owner)),
            (DocumentStatus.APPROVED, lambda: apply_approve(state, admin, now=NOW)),
            (DocumentStatus.REJECTED, lambda: apply_reject(state, admin, "Needs a signature")),
        ]
        for target, action in actions:
            if can_transition(status, target):
                assert action().status == target
            else:
                with pytest.raises(InvalidStateError):
                    action()

    def test_actions_read_the_transition_table(
        self, monkeypatch: pytest.MonkeyPatch, draft: DocumentState, owner: Principal, admin: Principal
    ):
        """Verify changing an edge in the table changes what the actions allow."""
        approved = apply_approve(_pending(draft, owner), admin, now=NOW)
        monkeypatch.setitem(
            lifecycle.TRANSITIONS, DocumentStatus.APPROVED, frozenset({DocumentStatus.PENDING})
        )

        assert apply_submit(approved, owner).status == DocumentStatus.PENDING
        assert apply_edit(approved, DocumentPatch(title="Reissued"), owner).title == "Reissued"


class TestCreate:
    """Tests for building a new document."""

    def test_new_document_is_version_one_draft(self, draft: DocumentState, owner: Principal):
        """Verify the initial state."""
        assert draft.status == DocumentStatus.DRAFT
        assert draft.version == 1
        assert draft.previous_versions == ()
        assert draft.created_by == owner.id
        assert draft.updated_by == owner.id

    def test_empty_title_rejected(self, owner: Principal):
        """Verify a blank title is a validation error."""
        with pytest.raises(ValidationError, match="Title is required"):
            new_document("   ", {"body": "x"}, owner)

    def test_missing_content_rejected(self, owner: Principal):
        """Verify content is required."""
        with pytest.raises(ValidationError, match="Content is required"):
            new_document("Title", None, owner)


class TestEdit:
    """Tests for editing."""

    def test_draft_edit_keeps_version(self, draft: DocumentState, owner: Principal):
        """Verify editing a draft neither snapshots nor bumps the version."""
        edited = apply_edit(draft, DocumentPatch(title="Revised"), owner, now=NOW)

        assert edited.title == "Revised"
        assert edited.content == draft.content
        assert edited.version == 1
        assert edited.previous_versions == ()
        assert edited.status == DocumentStatus.DRAFT

    def test_pending_edit_snapshots_and_bumps_version(self, draft: DocumentState, owner: Principal):
        """Verify editing a pending document archives the current version."""
        pending = _pending(draft, owner)
        edited = apply_edit(pending, DocumentPatch(content={"body": "new"}), owner, now=NOW)

        assert edited.version == 2
        assert len(edited.previous_versions) == 1
        snapshot = edited.previous_versions[0]
        assert snapshot["version"] == 1
        assert snapshot["content"] == {"body": "<p>Exams start Monday</p>"}
        assert snapshot["updated_by"] == str(owner.id)
        assert edited.status == DocumentStatus.PENDING

    def test_rejected_edit_returns_to_draft(
        self, draft: DocumentState, owner: Principal, admin: Principal
    ):
        """Verify editing a rejected document clears the rejection."""
        rejected = apply_reject(_pending(draft, owner), admin, "Missing dates")
        edited = apply_edit(rejected, DocumentPatch(content={"body": "fixed"}), owner, now=NOW)

        assert edited.status == DocumentStatus.DRAFT
        assert edited.rejection_reason is None
        assert edited.version == 2
        assert len(edited.previous_versions) == 1

    def test_version_tracks_history_length(
        self, draft: DocumentState, owner: Principal, admin: Principal
    ):
        """Verify len(previous_versions) == version - 1 across a reject/resubmit loop."""
        state = draft
        for round_ in range(3):
            state = apply_submit(state, owner)
            state = apply_reject(state, admin, f"Round {round_}")
            state = apply_edit(state, DocumentPatch(title=f"Take {round_}"), owner, now=NOW)
            assert len(state.previous_versions) == state.version - 1

        assert state.version == 4

    def test_edit_approved_refused(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify approved documents are immutable, even for administrators."""
        approved = apply_approve(_pending(draft, owner), admin, now=NOW)

        with pytest.raises(InvalidStateError, match="Cannot update an approved document"):
            apply_edit(approved, DocumentPatch(title="x"), owner)
        with pytest.raises(InvalidStateError):
            apply_edit(approved, DocumentPatch(title="x"), admin)

    def test_edit_by_stranger_refused(self, draft: DocumentState, stranger: Principal):
        """Verify only owner or admin may edit."""
        with pytest.raises(PermissionDeniedError):
            apply_edit(draft, DocumentPatch(title="x"), stranger)

    def test_admin_may_edit(self, draft: DocumentState, admin: Principal):
        """Verify an administrator can edit someone else's document."""
        edited = apply_edit(draft, DocumentPatch(title="Admin fix"), admin, now=NOW)

        assert edited.title == "Admin fix"
        assert edited.updated_by == admin.id
        assert edited.created_by == draft.created_by

    def test_blank_title_refused(self, draft: DocumentState, owner: Principal):
        """Verify an explicit empty title is a validation error."""
        with pytest.raises(ValidationError):
            apply_edit(draft, DocumentPatch(title=""), owner)

    def test_metadata_merged(self, owner: Principal):
        """Verify metadata patches merge shallowly."""
        state = new_document("T", {}, owner, metadata={"department": "Physics", "tags": ["a"]})
        edited = apply_edit(state, DocumentPatch(metadata={"tags": ["b"]}), owner)

        assert edited.metadata == {"department": "Physics", "tags": ["b"]}

    def test_input_state_not_mutated(self, draft: DocumentState, owner: Principal):
        """Verify transitions return new states."""
        pending = _pending(draft, owner)
        apply_edit(pending, DocumentPatch(title="Changed"), owner)

        assert pending.title == "Exam circular"
        assert pending.version == 1
        assert draft.status == DocumentStatus.DRAFT


class TestSubmit:
    """Tests for submitting."""

    def test_submit_draft(self, draft: DocumentState, owner: Principal):
        """Verify draft -> pending."""
        assert apply_submit(draft, owner).status == DocumentStatus.PENDING

    def test_resubmit_rejected(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify rejected -> pending is allowed without editing."""
        rejected = apply_reject(_pending(draft, owner), admin, "Typo")

        assert apply_submit(rejected, owner).status == DocumentStatus.PENDING

    def test_submit_twice_refused(self, draft: DocumentState, owner: Principal):
        """Verify the message names the current status."""
        pending = _pending(draft, owner)

        with pytest.raises(InvalidStateError, match="Document is already pending"):
            apply_submit(pending, owner)

    def test_submit_by_admin_refused(self, draft: DocumentState, admin: Principal):
        """Verify only the owner submits."""
        with pytest.raises(PermissionDeniedError):
            apply_submit(draft, admin)


class TestReview:
    """Tests for approve and reject."""

    def test_approve(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify approval records the reviewer and date."""
        approved = apply_approve(_pending(draft, owner), admin, now=NOW)

        assert approved.status == DocumentStatus.APPROVED
        assert approved.approved_by == admin.id
        assert approved.approval_date == NOW

    def test_approve_requires_admin(self, draft: DocumentState, owner: Principal):
        """Verify owners cannot approve their own documents."""
        with pytest.raises(PermissionDeniedError, match="Only administrators"):
            apply_approve(_pending(draft, owner), owner)

    def test_approve_draft_refused(self, draft: DocumentState, admin: Principal):
        """Verify approval needs a pending document."""
        with pytest.raises(InvalidStateError, match="not pending"):
            apply_approve(draft, admin)

    def test_reject_requires_reason(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify an empty reason is a validation error."""
        pending = _pending(draft, owner)

        with pytest.raises(ValidationError, match="Rejection reason is required"):
            apply_reject(pending, admin, "  ")
        with pytest.raises(ValidationError):
            apply_reject(pending, admin, None)

    def test_reject(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify rejection stores the reason."""
        rejected = apply_reject(_pending(draft, owner), admin, " Add the venue ")

        assert rejected.status == DocumentStatus.REJECTED
        assert rejected.rejection_reason == "Add the venue"

    def test_reject_approved_refused(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify approved documents cannot be rejected."""
        approved = apply_approve(_pending(draft, owner), admin)

        with pytest.raises(InvalidStateError):
            apply_reject(approved, admin, "Too late")


class TestAccess:
    """Tests for read, delete and export permissions."""

    def test_owner_and_admin_can_read(self, draft: DocumentState, owner: Principal, admin: Principal):
        """Verify read access."""
        check_read(draft, owner)
        check_read(draft, admin)

    def test_stranger_cannot_read_or_delete(self, draft: DocumentState, stranger: Principal):
        """Verify strangers are refused."""
        with pytest.raises(PermissionDeniedError):
            check_read(draft, stranger)
        with pytest.raises(PermissionDeniedError):
            check_delete(draft, stranger)

    def test_pdf_url_preserved_in_snapshot(self, draft: DocumentState, owner: Principal):
        """Verify an exported PDF is kept with the archived version."""
        exported = apply_pdf_export(draft, owner, "/uploads/pdfs/a.pdf")
        edited = apply_edit(apply_submit(exported, owner), DocumentPatch(title="v2"), owner)

        assert edited.previous_versions[0]["pdf_url"] == "/uploads/pdfs/a.pdf"
        assert edited.pdf_url == "/uploads/pdfs/a.pdf"
