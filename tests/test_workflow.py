"""Transition tables for documents, tickets and companies."""
import pytest

from student_portal.services.workflow import (
    InvalidTransition, company_status_after_edit, company_transition,
    document_transition, ticket_transition
)


@pytest.mark.parametrize("target", ["APPROVED", "REJECTED"])
def test_pending_document_can_be_reviewed(target):
    assert document_transition("PENDING", target) == target


@pytest.mark.parametrize("current", ["APPROVED", "REJECTED"])
def test_reviewed_document_is_final(current):
    with pytest.raises(InvalidTransition) as exc:
        document_transition(current, "APPROVED")
    assert exc.value.message == f"Document already {current.lower()}"


def test_document_cannot_go_back_to_pending():
    with pytest.raises(InvalidTransition):
        document_transition("PENDING", "PENDING")


@pytest.mark.parametrize("current,target", [
    ("OPEN", "IN_PROGRESS"),
    ("OPEN", "COMPLETED"),
    ("IN_PROGRESS", "IN_PROGRESS"),
    ("IN_PROGRESS", "COMPLETED"),
])
def test_ticket_allowed_moves(current, target):
    assert ticket_transition(current, target) == target


@pytest.mark.parametrize("target", ["IN_PROGRESS", "COMPLETED", "OPEN"])
def test_completed_ticket_is_final(target):
    with pytest.raises(InvalidTransition) as exc:
        ticket_transition("COMPLETED", target)
    assert exc.value.message == "Ticket already completed"


def test_ticket_cannot_reopen():
    with pytest.raises(InvalidTransition):
        ticket_transition("IN_PROGRESS", "OPEN")


def test_company_status_is_case_insensitive():
    assert company_transition("pending", "VERIFIED") == "verified"
    assert company_transition("verified", "Rejected") == "rejected"
    assert company_transition(None, "pending") == "pending"


def test_company_status_rejects_unknown_values():
    with pytest.raises(InvalidTransition):
        company_transition("pending", "APPROVED")


def test_editing_verified_company_returns_to_pending():
    assert company_status_after_edit("verified") == "pending"
    assert company_status_after_edit("rejected") == "rejected"
    assert company_status_after_edit(None) == "pending"
