"""
Budget API endpoints.
This module provides create, read, update and archive endpoints for budgets.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.auth import get_current_actor
from budgetx.core.deps import get_notification_emitter, get_pagination_params, require_roles
from budgetx.core.logging import logger
from budgetx.db.session import get_db
from budgetx.models.budget import BudgetStatus
from budgetx.models.user import Role
from budgetx.schemas.budget import Budget, BudgetCreate, BudgetUpdate
from budgetx.schemas.common import ApiResponse, PaginatedResponse
from budgetx.schemas.user import Actor
from budgetx.services.budget import BudgetService
from budgetx.services.notification import NotificationEmitter
from budgetx.utils.pagination import PaginationParams

router = APIRouter()


@router.post("", response_model=ApiResponse[Budget], status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_in: BudgetCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
):
    """
    Create a new budget.

    Args:
        budget_in: Budget creation data
        db: Database session
        actor: Current ADMIN or MANAGER
        emitter: Notification side channel

    Returns:
        Created budget
    """
    logger.info(f"Budget creation requested by: {actor.id}")
    budget = await BudgetService.create(db, budget_in, actor, emitter)
    return ApiResponse(data=Budget.model_validate(budget), message="Budget created")


@router.get("", response_model=PaginatedResponse[Budget])
async def get_all_budgets(
    db: AsyncSession = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    category_id: Optional[UUID] = Query(None, alias="categoryId"),
    budget_status: Optional[BudgetStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Case-insensitive name match"),
    actor: Actor = Depends(get_current_actor),
):
    """Get budgets visible to the current user, newest first."""
    return await BudgetService.get_all(
        db,
        actor,
        pagination,
        department_id=department_id,
        category_id=category_id,
        status=budget_status,
        search=search,
        transform=Budget.model_validate,
    )


@router.get("/{budget_id}", response_model=ApiResponse[Budget])
async def get_budget(
    budget_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Get a budget by ID.

    Args:
        budget_id: Budget ID
        db: Database session
        actor: Current user

    Returns:
        Budget with derived ``remaining``
    """
    logger.debug(f"Budget details requested for ID: {budget_id}")
    budget = await BudgetService.get_visible(db, budget_id, actor)
    return ApiResponse(data=Budget.model_validate(budget))


@router.patch("/{budget_id}", response_model=ApiResponse[Budget])
async def update_budget(
    budget_id: UUID,
    budget_in: BudgetUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """
    Update a budget.

    Args:
        budget_id: Budget ID
        budget_in: Budget update data
        db: Database session
        actor: Current ADMIN or MANAGER

    Returns:
        Updated budget
    """
    logger.info(f"Budget update requested for ID: {budget_id} by: {actor.id}")
    budget = await BudgetService.update(db, budget_id, budget_in, actor)
    return ApiResponse(data=Budget.model_validate(budget), message="Budget updated")


@router.delete("/{budget_id}", response_model=ApiResponse[Budget])
async def archive_budget(
    budget_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN)),
):
    """Archive a budget. Budgets are never hard-deleted."""
    logger.info(f"Budget archive requested for ID: {budget_id} by: {actor.id}")
    budget = await BudgetService.archive(db, budget_id, actor)
    return ApiResponse(data=Budget.model_validate(budget), message="Budget archived")
