"""
Workflow transition tables for the role-gated state machines.

- Documents: PENDING -> APPROVED | REJECTED
- Tickets:   OPEN -> IN_PROGRESS | COMPLETED, IN_PROGRESS -> IN_PROGRESS | COMPLETED
- Companies: pending | verified | rejected, set freely by the super admin
"""

from typing import Dict, FrozenSet


class InvalidTransition(Exception):
    """Raised when a workflow entity cannot move to the requested status."""

    def __init__(self, entity: str, current: str, target: str, message: str = None):
        self.entity = entity
        self.current = current
        self.target = target
        self.message = message or f"Cannot move {entity} from {current} to {target}"
        super().__init__(self.message)


DOCUMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "PENDING": frozenset({"APPROVED", "REJECTED"}),
    "APPROVED": frozenset(),
    "REJECTED": frozenset(),
}

TICKET_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "OPEN": frozenset({"IN_PROGRESS", "COMPLETED"}),
    "IN_PROGRESS": frozenset({"IN_PROGRESS", "COMPLETED"}),
    "COMPLETED": frozenset(),
}

COMPANY_STATUSES = frozenset({"pending", "verified", "rejected"})
COMPANY_TRANSITIONS: Dict[str, FrozenSet[str]] = {status: COMPANY_STATUSES for status in COMPANY_STATUSES}


def check_transition(table: Dict[str, FrozenSet[str]], entity: str, current: str, target: str) -> str:
    """Return target if allowed, otherwise raise InvalidTransition."""
    if target not in table.get(current, frozenset()):
        raise InvalidTransition(entity, current, target)
    return target


def document_transition(current: str, target: str) -> str:
    if current != "PENDING":
        raise InvalidTransition("document", current, target, f"Document already {current.lower()}")
    return check_transition(DOCUMENT_TRANSITIONS, "document", current, target)


def ticket_transition(current: str, target: str) -> str:
    if current == "COMPLETED":
        raise InvalidTransition("ticket", current, target, "Ticket already completed")
    return check_transition(TICKET_TRANSITIONS, "ticket", current, target)


def company_transition(current: str, target: str) -> str:
    """Normalize target (case-insensitive) and validate it."""
    normalized = (target or "").strip().lower()
    if normalized not in COMPANY_STATUSES:
        raise InvalidTransition(
            "company", current, target,
            "verification_status must be one of PENDING, VERIFIED, REJECTED"
        )
    return check_transition(COMPANY_TRANSITIONS, "company", current or "pending", normalized)


def company_status_after_edit(current: str) -> str:
    """Editing a verified profile sends it back for review."""
    return "pending" if current == "verified" else (current or "pending")
