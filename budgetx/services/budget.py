"""
Service layer for budget operations.

This module contains the business logic for budget-related operations,
abstracting away the database operations from the API endpoints. It is also
the ledger: ``record_approval`` is the only code path that moves ``spent``.
"""

from typing import Optional
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from budgetx.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from budgetx.core.logging import logger
from budgetx.core.rbac import ResourcePolicy, ScopeFilter
from budgetx.models.budget import Budget, BudgetStatus
from budgetx.models.user import Role
from budgetx.schemas.budget import BudgetCreate, BudgetUpdate
from budgetx.schemas.user import Actor
from budgetx.services.notification import NotificationEmitter
from budgetx.utils.pagination import PaginationParams, paginate_query
from uuid import UUID


class BudgetService:
    """Service class for budget operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        budget_in: BudgetCreate,
        actor: Actor,
        emitter: Optional[NotificationEmitter] = None,
    ) -> Budget:
        """
        Create a new budget.

        MANAGERs always create in their own department; the owner defaults
        to the actor.

        Args:
            db: Database session
            budget_in: Budget creation data
            actor: Authenticated caller
            emitter: Notification side channel

        Returns:
            Created budget
        """
        data = budget_in.model_dump()
        if actor.role == Role.MANAGER:
            if actor.department_id is None:
                raise ForbiddenError("Department assignment required")
            data["department_id"] = actor.department_id
        elif actor.role != Role.ADMIN:
            raise ForbiddenError("Insufficient permissions")
        if data.get("owner_id") is None:
            data["owner_id"] = actor.id

        logger.info(f"Creating new budget '{data['name']}' for department: {data['department_id']}")

        budget = Budget(**data, spent=Decimal("0.00"), status=BudgetStatus.ACTIVE)
        db.add(budget)
        await db.commit()

        budget = await BudgetService.get_by_id(db, budget.id)
        logger.info(f"Created budget with ID: {budget.id}")

        if emitter is not None:
            await emitter.budget_created(budget.department_id, actor.id, budget.name, budget.amount)
        return budget

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        budget_id: UUID
    ) -> Optional[Budget]:
        """
        Get a budget by ID, always reloading persisted values.

        Args:
            db: Database session
            budget_id: Budget ID

        Returns:
            Budget if found, None otherwise
        """
        logger.debug(f"Getting budget by ID: {budget_id}")

        result = await db.execute(
            select(Budget)
            .where(Budget.id == budget_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_visible(db: AsyncSession, budget_id: UUID, actor: Actor) -> Budget:
        """
        Get a budget the actor is allowed to see.

        Raises:
            NotFoundError: If the budget does not exist
            ForbiddenError: If it is outside the actor's scope
        """
        budget = await BudgetService.get_by_id(db, budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        if not ResourcePolicy.can_view_budget(actor, budget):
            logger.warning(f"Budget access denied: actor {actor.id} ({actor.role.value}) -> {budget_id}")
            raise ForbiddenError("Access denied")
        return budget

    @staticmethod
    async def get_all(
        db: AsyncSession,
        actor: Actor,
        pagination: PaginationParams,
        department_id: Optional[UUID] = None,
        category_id: Optional[UUID] = None,
        status: Optional[BudgetStatus] = None,
        search: Optional[str] = None,
        transform=None,
    ):
        """
        List budgets visible to the actor, newest first.

        Explicit filters narrow the role scope; they never widen it.
        """
        logger.debug(f"Listing budgets for actor {actor.id}, page={pagination.page}")

        query = select(Budget).where(ScopeFilter.budgets(actor))
        if department_id:
            query = query.where(Budget.department_id == department_id)
        if category_id:
            query = query.where(Budget.category_id == category_id)
        if status:
            query = query.where(Budget.status == status)
        if search:
            query = query.where(Budget.name.ilike(f"%{search}%"))

        return await paginate_query(
            db, query, pagination, order_by=Budget.created_at.desc(), transform=transform
        )

    @staticmethod
    async def update(
        db: AsyncSession,
        budget_id: UUID,
        budget_in: BudgetUpdate,
        actor: Actor,
    ) -> Budget:
        """
        Update a budget.

        A new ``amount`` is applied through ``adjust_allocation`` so it can
        never drop below what is already spent.

        Args:
            db: Database session
            budget_id: Budget ID
            budget_in: Budget update data
            actor: Authenticated caller

        Returns:
            Updated budget
        """
        logger.info(f"Updating budget with ID: {budget_id}")

        budget = await BudgetService.get_by_id(db, budget_id)
        if not budget:
            logger.warning(f"Budget not found for update, ID: {budget_id}")
            raise NotFoundError("Budget", budget_id)
        if not ResourcePolicy.can_manage_budget(actor, budget.department_id):
            raise ForbiddenError("Access denied")

        update_data = budget_in.model_dump(exclude_unset=True)
        new_amount = update_data.pop("amount", None)

        start_date = update_data.get("start_date", budget.start_date)
        end_date = update_data.get("end_date", budget.end_date)
        if end_date < start_date:
            raise ValidationError("endDate must not be before startDate")

        if new_amount is not None:
            budget = await BudgetService.adjust_allocation(db, budget_id, new_amount)

        if update_data:
            for field, value in update_data.items():
                setattr(budget, field, value)
            await db.commit()

        logger.info(f"Updated budget ID: {budget_id}")
        return await BudgetService.get_by_id(db, budget_id)

    @staticmethod
    async def archive(db: AsyncSession, budget_id: UUID, actor: Actor) -> Budget:
        """
        Archive a budget. Budgets are never hard-deleted so expense history
        keeps resolving.
        """
        if actor.role != Role.ADMIN:
            raise ForbiddenError("Insufficient permissions")
        logger.info(f"Archiving budget with ID: {budget_id}")

        result = await db.execute(
            update(Budget)
            .where(Budget.id == budget_id)
            .values(status=BudgetStatus.ARCHIVED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError("Budget", budget_id)
        await db.commit()
        return await BudgetService.get_by_id(db, budget_id)

    @staticmethod
    async def adjust_allocation(
        db: AsyncSession,
        budget_id: UUID,
        new_amount: Decimal,
    ) -> Budget:
        """
        Set a budget's allocated ``amount``.

        The floor check and the write are one conditional UPDATE, so an
        approval landing concurrently cannot push ``spent`` above the new
        allocation.

        Raises:
            ValidationError: If ``new_amount`` is negative or below current spent
            NotFoundError: If the budget does not exist
        """
        new_amount = Decimal(new_amount)
        if new_amount < 0:
            raise ValidationError("Budget amount cannot be negative")

        result = await db.execute(
            update(Budget)
            .where(Budget.id == budget_id, Budget.spent <= new_amount)
            .values(amount=new_amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            await db.commit()
            logger.info(f"Budget {budget_id} allocation set to {new_amount}")
            return await BudgetService.get_by_id(db, budget_id)

        await db.rollback()
        budget = await BudgetService.get_by_id(db, budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        logger.warning(
            f"Rejected allocation {new_amount} for budget {budget_id}: spent is {budget.spent}"
        )
        raise ValidationError(
            "Budget amount cannot be less than already spent amount",
            {"spent": str(budget.spent), "requested": str(new_amount)},
        )

    @staticmethod
    async def record_approval(
        db: AsyncSession,
        budget_id: UUID,
        amount: Decimal,
    ) -> bool:
        """
        Add an approved expense's amount to the budget's ``spent``.

        Runs as a single ``spent = spent + amount`` UPDATE inside the caller's
        transaction; the caller commits. Must be called exactly once per
        approved expense.

        Args:
            db: Database session
            budget_id: Budget ID
            amount: Approved expense amount

        Returns:
            True if the budget row was updated, False if it does not exist
        """
        logger.debug(f"Recording approval of {amount} against budget {budget_id}")

        result = await db.execute(
            update(Budget)
            .where(Budget.id == budget_id)
            .values(spent=Budget.spent + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
