"""
Approval coordinator.

The only code path that moves an expense out of PENDING. The status change is
a single conditional UPDATE (``... WHERE id = :id AND status = 'PENDING'``);
whichever caller gets ``rowcount == 1`` owns the transition and is the only
one to touch the ledger. Everybody else re-reads and either replays the
already-applied outcome or gets a conflict.

Notifications are sent after the commit through ``NotificationEmitter`` and
never affect the result.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.config import settings
from budgetx.core.exceptions import (
    DataIntegrityError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
)
from budgetx.core.logging import logger
from budgetx.models.base import utcnow
from budgetx.models.budget import Budget
from budgetx.models.expense import Expense, ExpenseStatus
from budgetx.schemas.user import Actor
from budgetx.services import workflow
from budgetx.services.budget import BudgetService
from budgetx.services.expense import ExpenseService
from budgetx.services.notification import NotificationEmitter
from budgetx.services.workflow import Decision


@dataclass
class ApprovalOutcome:
    """Result of a decision: the resolved expense and whether it was a replay."""

    expense: Expense
    already_processed: bool = False
    message: Optional[str] = None


def crossed_threshold(
    previous_spent: Decimal, spent: Decimal, allocated: Decimal, threshold: int
) -> Optional[int]:
    """
    Return the usage percentage if moving from ``previous_spent`` to ``spent``
    crossed ``threshold`` percent or 100 percent of ``allocated``.
    """
    if allocated <= 0:
        return None
    before = Decimal(previous_spent) * 100 / Decimal(allocated)
    after = Decimal(spent) * 100 / Decimal(allocated)
    for limit in (threshold, 100):
        if before < limit <= after:
            return int(after)
    return None


class ApprovalCoordinator:
    """Performs expense decisions as one logical unit."""

    def __init__(self, emitter: NotificationEmitter, warning_threshold: Optional[int] = None):
        self.emitter = emitter
        self.warning_threshold = (
            settings.notifications.budget_warning_threshold
            if warning_threshold is None
            else warning_threshold
        )

    async def approve(self, db: AsyncSession, expense_id: UUID, actor: Actor) -> ApprovalOutcome:
        return await self.decide(db, expense_id, actor, Decision.APPROVE)

    async def reject(
        self,
        db: AsyncSession,
        expense_id: UUID,
        actor: Actor,
        reason: Optional[str] = None,
    ) -> ApprovalOutcome:
        return await self.decide(db, expense_id, actor, Decision.REJECT, reason)

    async def decide(
        self,
        db: AsyncSession,
        expense_id: UUID,
        actor: Actor,
        decision: Decision,
        reason: Optional[str] = None,
    ) -> ApprovalOutcome:
        """
        Approve or reject an expense.

        Args:
            db: Database session
            expense_id: Expense to decide on
            actor: Authenticated caller, must be an in-scope ADMIN or MANAGER
            decision: APPROVE or REJECT
            reason: Optional rejection reason, ignored for approvals

        Returns:
            ApprovalOutcome with the expense's references populated

        Raises:
            NotFoundError: If the expense does not exist
            ForbiddenError: If the actor may not decide on it
            InvalidStateError: If it is already in the other terminal state
            DataIntegrityError: If an approved expense's budget is missing
        """
        target = workflow.target_status(decision)
        logger.info(f"{decision.value} requested on expense {expense_id} by {actor.id}")

        expense = await ExpenseService.get_by_id(db, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        department_id = await ExpenseService.get_budget_department(db, expense.budget_id)
        try:
            workflow.ensure_can_decide(actor, department_id)
        except ForbiddenError:
            logger.warning(f"Decision on expense {expense_id} denied for actor {actor.id}")
            raise

        if not workflow.can_transition(expense.status, target):
            return await self._resolve_settled(db, expense_id, target)

        values = {
            "status": target,
            "approved_by": actor.id,
            "approved_at": utcnow(),
            "rejection_reason": reason if decision == Decision.REJECT else None,
        }
        result = await db.execute(
            update(Expense)
            .where(Expense.id == expense_id, Expense.status == ExpenseStatus.PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            await db.rollback()
            return await self._resolve_settled(db, expense_id, target)

        # The row is ours now; read amount and budget as committed with the transition.
        row = (
            await db.execute(
                select(Expense.amount, Expense.budget_id, Expense.user_id).where(
                    Expense.id == expense_id
                )
            )
        ).one()
        amount, budget_id, submitter_id = row

        if decision == Decision.APPROVE:
            recorded = await BudgetService.record_approval(db, budget_id, amount)
            await db.commit()
            if not recorded:
                logger.error(
                    f"Expense {expense_id} approved but budget {budget_id} does not exist"
                )
                raise DataIntegrityError(
                    "Approved expense references a budget that does not exist",
                    {"expense_id": str(expense_id), "budget_id": str(budget_id)},
                )
        else:
            await db.commit()

        logger.info(f"Expense {expense_id} {target.value} by {actor.id}")

        budget = await BudgetService.get_by_id(db, budget_id)
        await self._notify(decision, submitter_id, amount, budget, reason)

        return ApprovalOutcome(expense=await ExpenseService.get_by_id(db, expense_id))

    async def _resolve_settled(
        self, db: AsyncSession, expense_id: UUID, target: ExpenseStatus
    ) -> ApprovalOutcome:
        current = await ExpenseService.get_by_id(db, expense_id)
        if current is None:
            raise NotFoundError("Expense", expense_id)
        if current.status == target:
            logger.info(f"Expense {expense_id} already {target.value}, replaying outcome")
            return ApprovalOutcome(
                expense=current,
                already_processed=True,
                message=workflow.replay_message(target),
            )
        logger.warning(
            f"Conflicting decision on expense {expense_id}: is {current.status.value}, "
            f"requested {target.value}"
        )
        raise InvalidStateError(
            workflow.conflict_message(current.status, target), current.status.value
        )

    async def _notify(
        self,
        decision: Decision,
        submitter_id: UUID,
        amount: Decimal,
        budget: Optional[Budget],
        reason: Optional[str],
    ) -> None:
        budget_name = budget.name if budget is not None else "a deleted budget"
        if decision == Decision.REJECT:
            await self.emitter.expense_rejected(submitter_id, amount, budget_name, reason)
            return

        await self.emitter.expense_approved(submitter_id, amount, budget_name)
        if budget is None:
            return
        percentage = crossed_threshold(
            budget.spent - amount, budget.spent, budget.amount, self.warning_threshold
        )
        if percentage is not None:
            await self.emitter.budget_limit_warning(budget.owner_id, budget.name, percentage)
