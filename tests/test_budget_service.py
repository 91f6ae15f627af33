"""
Tests for BudgetService, including the ledger operations.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from budgetx.models.budget import BudgetPeriod, BudgetStatus
from budgetx.models.notification import Notification
from budgetx.schemas.budget import BudgetCreate, BudgetUpdate
from budgetx.services.budget import BudgetService
from budgetx.utils.pagination import PaginationParams

from conftest import actor_for


@pytest.mark.asyncio
async def test_manager_create_forces_own_department(db_session: AsyncSession, seed, emitter):
    budget_in = BudgetCreate(
        name="Conference Fund",
        department_id=seed.operations.id,
        category_id=seed.category.id,
        amount=Decimal("300.00"),
        period=BudgetPeriod.MONTHLY,
        start_date=date(2026, 2, 1),
        end_date=date(2026, 2, 28),
    )

    budget = await BudgetService.create(db_session, budget_in, actor_for(seed.manager), emitter)

    assert budget.department_id == seed.engineering.id
    assert budget.owner_id == seed.manager.id
    assert budget.spent == Decimal("0")
    assert budget.status == BudgetStatus.ACTIVE

    result = await db_session.execute(
        select(Notification).where(Notification.title == "New Budget Created")
    )
    recipients = {n.user_id for n in result.scalars().all()}
    assert recipients == {seed.employee.id}


@pytest.mark.asyncio
async def test_user_cannot_create_budget(db_session: AsyncSession, seed):
    budget_in = BudgetCreate(
        name="Snacks",
        department_id=seed.engineering.id,
        category_id=seed.category.id,
        amount=Decimal("10"),
        period=BudgetPeriod.MONTHLY,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 1, 31),
    )
    with pytest.raises(ForbiddenError):
        await BudgetService.create(db_session, budget_in, actor_for(seed.employee))


@pytest.mark.asyncio
async def test_adjust_allocation_floor(db_session: AsyncSession, seed):
    with pytest.raises(ValidationError) as exc_info:
        await BudgetService.adjust_allocation(db_session, seed.budget.id, Decimal("150.00"))
    assert "already spent" in exc_info.value.message

    budget = await BudgetService.get_by_id(db_session, seed.budget.id)
    assert budget.amount == Decimal("1000")


@pytest.mark.asyncio
async def test_adjust_allocation_to_exactly_spent(db_session: AsyncSession, seed):
    budget = await BudgetService.adjust_allocation(db_session, seed.budget.id, Decimal("200.00"))
    assert budget.amount == Decimal("200")
    assert budget.remaining == Decimal("0")


@pytest.mark.asyncio
async def test_adjust_allocation_rejects_negative(db_session: AsyncSession, seed):
    with pytest.raises(ValidationError):
        await BudgetService.adjust_allocation(db_session, seed.budget.id, Decimal("-1"))


@pytest.mark.asyncio
async def test_adjust_allocation_missing_budget(db_session: AsyncSession, seed):
    with pytest.raises(NotFoundError):
        await BudgetService.adjust_allocation(db_session, uuid.uuid4(), Decimal("10"))


@pytest.mark.asyncio
async def test_record_approval_increments_spent(db_session: AsyncSession, seed):
    assert await BudgetService.record_approval(db_session, seed.budget.id, Decimal("150.00"))
    await db_session.commit()

    budget = await BudgetService.get_by_id(db_session, seed.budget.id)
    assert budget.spent == Decimal("350")
    assert budget.remaining == Decimal("650")


@pytest.mark.asyncio
async def test_update_below_spent_leaves_other_fields(db_session: AsyncSession, seed):
    with pytest.raises(ValidationError):
        await BudgetService.update(
            db_session,
            seed.budget.id,
            BudgetUpdate(name="Renamed", amount=Decimal("100")),
            actor_for(seed.manager),
        )

    budget = await BudgetService.get_by_id(db_session, seed.budget.id)
    assert budget.name == "Engineering Travel"


@pytest.mark.asyncio
async def test_update_outside_department_forbidden(db_session: AsyncSession, seed):
    with pytest.raises(ForbiddenError):
        await BudgetService.update(
            db_session, seed.budget.id, BudgetUpdate(name="Nope"), actor_for(seed.other_manager)
        )


@pytest.mark.asyncio
async def test_archive_requires_admin(db_session: AsyncSession, seed):
    with pytest.raises(ForbiddenError):
        await BudgetService.archive(db_session, seed.budget.id, actor_for(seed.manager))

    budget = await BudgetService.archive(db_session, seed.budget.id, actor_for(seed.admin))
    assert budget.status == BudgetStatus.ARCHIVED


@pytest.mark.asyncio
async def test_get_all_filters_never_widen_scope(db_session: AsyncSession, seed):
    page = await BudgetService.get_all(
        db_session,
        actor_for(seed.manager),
        PaginationParams(page=1, limit=20),
        department_id=seed.operations.id,
    )
    assert page.total == 0

    page = await BudgetService.get_all(
        db_session, actor_for(seed.admin), PaginationParams(page=1, limit=1), search="travel"
    )
    assert page.total == 1
    assert page.data[0].name == "Engineering Travel"
    assert page.has_next_page is False
