"""
Service layer for expense operations.

Submission, role-scoped reads and pending-only edits. Status transitions are
handled by ``budgetx.services.approval``.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from budgetx.core.logging import logger
from budgetx.core.rbac import APPROVER_ROLES, ResourcePolicy, ScopeFilter
from budgetx.models.budget import Budget, BudgetStatus
from budgetx.models.expense import Expense, ExpenseStatus
from budgetx.schemas.expense import ExpenseCreate, ExpenseUpdate
from budgetx.schemas.user import Actor
from budgetx.services import workflow
from budgetx.services.budget import BudgetService
from budgetx.services.notification import NotificationEmitter
from budgetx.utils.pagination import PaginationParams, paginate_query


class ExpenseService:
    """Service class for expense operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        expense_in: ExpenseCreate,
        actor: Actor,
        emitter: Optional[NotificationEmitter] = None,
    ) -> Expense:
        """
        Submit a new PENDING expense owned by the actor and notify approvers.

        Args:
            db: Database session
            expense_in: Expense creation data
            actor: Authenticated caller, becomes the owner
            emitter: Notification side channel

        Returns:
            Created expense with references populated
        """
        logger.info(f"Expense submission by {actor.id} against budget {expense_in.budget_id}")

        budget = await BudgetService.get_visible(db, expense_in.budget_id, actor)
        if budget.status == BudgetStatus.ARCHIVED:
            raise ValidationError("Cannot submit expenses against an archived budget")

        expense = Expense(
            **expense_in.model_dump(),
            user_id=actor.id,
            status=ExpenseStatus.PENDING,
        )
        db.add(expense)
        await db.commit()

        expense = await ExpenseService.get_by_id(db, expense.id)
        logger.info(f"Created expense with ID: {expense.id}")

        if emitter is not None:
            await emitter.pending_approval(
                budget.department_id,
                actor.id,
                actor.name or str(actor.id),
                expense.amount,
                expense.description,
            )
        return expense

    @staticmethod
    async def get_by_id(db: AsyncSession, expense_id: UUID) -> Optional[Expense]:
        """
        Get an expense by ID with budget, user and approver populated.

        Always reloads from the database so callers see the committed status.
        """
        logger.debug(f"Getting expense by ID: {expense_id}")

        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_budget_department(db: AsyncSession, budget_id: UUID) -> Optional[UUID]:
        result = await db.execute(select(Budget.department_id).where(Budget.id == budget_id))
        return result.scalar()

    @staticmethod
    async def get_visible(db: AsyncSession, expense_id: UUID, actor: Actor) -> Expense:
        """
        Get an expense the actor is allowed to see.

        Raises:
            NotFoundError: If the expense does not exist
            ForbiddenError: If it is outside the actor's scope
        """
        expense = await ExpenseService.get_by_id(db, expense_id)
        if expense is None:
            raise NotFoundError("Expense", expense_id)
        department_id = await ExpenseService.get_budget_department(db, expense.budget_id)
        if not ResourcePolicy.can_view_expense(actor, expense, department_id):
            logger.warning(f"Expense access denied: actor {actor.id} ({actor.role.value}) -> {expense_id}")
            raise ForbiddenError("Access denied")
        return expense

    @staticmethod
    async def get_all(
        db: AsyncSession,
        actor: Actor,
        pagination: PaginationParams,
        budget_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        status: Optional[ExpenseStatus] = None,
        transform=None,
    ):
        """List expenses visible to the actor, newest first."""
        logger.debug(f"Listing expenses for actor {actor.id}, page={pagination.page}")

        query = select(Expense).where(ScopeFilter.expenses(actor))
        if budget_id:
            query = query.where(Expense.budget_id == budget_id)
        if user_id:
            query = query.where(Expense.user_id == user_id)
        if status:
            query = query.where(Expense.status == status)

        return await paginate_query(
            db, query, pagination, order_by=Expense.created_at.desc(), transform=transform
        )

    @staticmethod
    async def get_pending(
        db: AsyncSession,
        actor: Actor,
        pagination: PaginationParams,
        transform=None,
    ):
        """Approval queue: PENDING expenses inside the approver's scope."""
        if actor.role not in APPROVER_ROLES:
            raise ForbiddenError("Insufficient permissions")
        return await ExpenseService.get_all(
            db, actor, pagination, status=ExpenseStatus.PENDING, transform=transform
        )

    @staticmethod
    async def update(
        db: AsyncSession,
        expense_id: UUID,
        expense_in: ExpenseUpdate,
        actor: Actor,
    ) -> Expense:
        """
        Edit a PENDING expense.

        The write is conditional on the status still being PENDING, so an
        edit racing an approval cannot change a terminal expense.

        Raises:
            NotFoundError, ForbiddenError, InvalidStateError
        """
        logger.info(f"Updating expense with ID: {expense_id}")

        expense = await ExpenseService.get_visible(db, expense_id, actor)
        department_id = await ExpenseService.get_budget_department(db, expense.budget_id)
        workflow.ensure_editable(actor, expense, department_id)

        update_data = expense_in.model_dump(exclude_unset=True)
        if not update_data:
            return expense

        result = await db.execute(
            update(Expense)
            .where(Expense.id == expense_id, Expense.status == ExpenseStatus.PENDING)
            .values(**update_data)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            current = await ExpenseService.get_by_id(db, expense_id)
            if current is None:
                raise NotFoundError("Expense", expense_id)
            workflow.ensure_editable(actor, current, department_id)
        await db.commit()

        logger.info(f"Updated expense ID: {expense_id}")
        return await ExpenseService.get_by_id(db, expense_id)
