"""
Expense lifecycle rules.

    PENDING --approve--> APPROVED   (terminal)
    PENDING --reject---> REJECTED   (terminal)

Pure functions only; persistence and the compare-and-swap live in
``budgetx.services.approval``.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional
from uuid import UUID

from budgetx.core.exceptions import ForbiddenError, InvalidStateError
from budgetx.core.rbac import APPROVER_ROLES, ResourcePolicy
from budgetx.models.expense import Expense, ExpenseStatus
from budgetx.schemas.user import Actor


class Decision(str, Enum):
    """What an approver asks for."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


TRANSITIONS: Dict[ExpenseStatus, FrozenSet[ExpenseStatus]] = {
    ExpenseStatus.PENDING: frozenset({ExpenseStatus.APPROVED, ExpenseStatus.REJECTED}),
    ExpenseStatus.APPROVED: frozenset(),
    ExpenseStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[ExpenseStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)

_DECISION_TARGETS = {
    Decision.APPROVE: ExpenseStatus.APPROVED,
    Decision.REJECT: ExpenseStatus.REJECTED,
}


def target_status(decision: Decision) -> ExpenseStatus:
    return _DECISION_TARGETS[decision]


def can_transition(current: ExpenseStatus, target: ExpenseStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def is_terminal(status: ExpenseStatus) -> bool:
    return status in TERMINAL_STATUSES


def ensure_can_decide(actor: Actor, budget_department_id: Optional[UUID]) -> None:
    """
    Raise unless the actor may approve or reject an expense whose budget
    belongs to ``budget_department_id``.
    """
    if actor.role not in APPROVER_ROLES:
        raise ForbiddenError("Insufficient permissions")
    if not ResourcePolicy.can_decide_expense(actor, budget_department_id):
        raise ForbiddenError("Expense is outside your department")


def ensure_editable(actor: Actor, expense: Expense, budget_department_id: Optional[UUID]) -> None:
    """Only PENDING expenses are editable, and only by the owner or an in-scope approver."""
    if is_terminal(expense.status):
        raise InvalidStateError(
            "Cannot edit approved or rejected expenses", expense.status.value
        )
    if not ResourcePolicy.can_edit_expense(actor, expense, budget_department_id):
        raise ForbiddenError("Access denied")


def conflict_message(current: ExpenseStatus, target: ExpenseStatus) -> str:
    return (
        f"Expense is already {current.value.lower()} "
        f"and cannot be {target.value.lower()}"
    )


def replay_message(status: ExpenseStatus) -> str:
    return f"Expense already {status.value.lower()}"
