# rbac.py
"""
Role-scoped access control.

Two views of the same rules live here:

* ``ScopeFilter`` builds SQL predicates restricting which budgets and
  expenses an actor may see. Every list query is filtered through it.
* ``ResourcePolicy`` answers the same question for a single loaded record,
  and also decides who may edit or approve.

Both are pure functions of the actor; neither touches the database.
A MANAGER or USER without a department never matches a department-scoped
rule.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import false, or_, select, true
from sqlalchemy.sql.elements import ColumnElement

from budgetx.models.budget import Budget
from budgetx.models.expense import Expense
from budgetx.models.user import Role
from budgetx.schemas.user import Actor

# Roles allowed to move an expense out of PENDING.
APPROVER_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class ScopeFilter:
    """SQL predicates for role-scoped reads."""

    @staticmethod
    def budgets(actor: Actor) -> ColumnElement[bool]:
        """
        Predicate over ``Budget`` rows visible to the actor.

        Args:
            actor: Authenticated caller

        Returns:
            SQLAlchemy boolean clause
        """
        if actor.role == Role.ADMIN:
            return true()
        if actor.role == Role.MANAGER:
            if actor.department_id is None:
                return false()
            return Budget.department_id == actor.department_id
        if actor.role == Role.USER:
            if actor.department_id is None:
                return Budget.owner_id == actor.id
            return or_(
                Budget.owner_id == actor.id,
                Budget.department_id == actor.department_id,
            )
        return false()

    @staticmethod
    def expenses(actor: Actor) -> ColumnElement[bool]:
        """
        Predicate over ``Expense`` rows visible to the actor.

        MANAGER scope goes through the expense's budget department.
        """
        if actor.role == Role.ADMIN:
            return true()
        if actor.role == Role.MANAGER:
            if actor.department_id is None:
                return false()
            department_budgets = select(Budget.id).where(
                Budget.department_id == actor.department_id
            )
            return Expense.budget_id.in_(department_budgets)
        if actor.role == Role.USER:
            return Expense.user_id == actor.id
        return false()


class ResourcePolicy:
    """Record-level access decisions mirroring ``ScopeFilter``."""

    @staticmethod
    def _same_department(actor: Actor, department_id: Optional[UUID]) -> bool:
        return actor.department_id is not None and actor.department_id == department_id

    @staticmethod
    def can_view_budget(actor: Actor, budget: Budget) -> bool:
        """
        Check if the actor can see a budget.

        Args:
            actor: Authenticated caller
            budget: Loaded budget

        Returns:
            True if visible, False otherwise
        """
        if actor.role == Role.ADMIN:
            return True
        if actor.role == Role.MANAGER:
            return ResourcePolicy._same_department(actor, budget.department_id)
        if actor.role == Role.USER:
            return budget.owner_id == actor.id or ResourcePolicy._same_department(
                actor, budget.department_id
            )
        return False

    @staticmethod
    def can_manage_budget(actor: Actor, budget_department_id: Optional[UUID]) -> bool:
        """ADMIN anywhere, MANAGER inside their own department."""
        if actor.role == Role.ADMIN:
            return True
        if actor.role == Role.MANAGER:
            return ResourcePolicy._same_department(actor, budget_department_id)
        return False

    @staticmethod
    def can_view_expense(
        actor: Actor, expense: Expense, budget_department_id: Optional[UUID]
    ) -> bool:
        if actor.role == Role.ADMIN:
            return True
        if actor.role == Role.MANAGER:
            return ResourcePolicy._same_department(actor, budget_department_id)
        if actor.role == Role.USER:
            return expense.user_id == actor.id
        return False

    @staticmethod
    def can_edit_expense(
        actor: Actor, expense: Expense, budget_department_id: Optional[UUID]
    ) -> bool:
        """Owner, or an ADMIN/MANAGER with the expense in scope."""
        if expense.user_id == actor.id:
            return True
        return ResourcePolicy.can_manage_budget(actor, budget_department_id)

    @staticmethod
    def can_decide_expense(actor: Actor, budget_department_id: Optional[UUID]) -> bool:
        """Approve/reject: ADMIN anywhere, MANAGER inside their department."""
        if actor.role not in APPROVER_ROLES:
            return False
        return ResourcePolicy.can_manage_budget(actor, budget_department_id)
