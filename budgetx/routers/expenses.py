"""
Expense API endpoints.

Submission, listing, pending edits, and the approve/reject transitions.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.auth import get_current_actor
from budgetx.core.deps import (
    get_approval_coordinator,
    get_notification_emitter,
    get_pagination_params,
    require_roles,
)
from budgetx.core.logging import logger
from budgetx.db.session import get_db
from budgetx.models.expense import ExpenseStatus
from budgetx.models.user import Role
from budgetx.schemas.common import ApiResponse, PaginatedResponse
from budgetx.schemas.expense import Expense, ExpenseCreate, ExpenseUpdate, RejectRequest
from budgetx.schemas.user import Actor
from budgetx.services.approval import ApprovalCoordinator, ApprovalOutcome
from budgetx.services.expense import ExpenseService
from budgetx.services.notification import NotificationEmitter
from budgetx.utils.pagination import PaginationParams

router = APIRouter()


def outcome_response(outcome: ApprovalOutcome, done_message: str) -> ApiResponse[Expense]:
    """Shape an approval outcome, flagging idempotent replays in ``message``."""
    return ApiResponse(
        data=Expense.model_validate(outcome.expense),
        message=outcome.message if outcome.already_processed else done_message,
    )


@router.post("", response_model=ApiResponse[Expense], status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_in: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
):
    """
    Submit a new expense for approval.

    Args:
        expense_in: Expense data
        db: Database session
        actor: Current user, recorded as the submitter
        emitter: Notification side channel

    Returns:
        Created PENDING expense
    """
    expense = await ExpenseService.create(db, expense_in, actor, emitter)
    return ApiResponse(data=Expense.model_validate(expense), message="Expense submitted")


@router.get("", response_model=PaginatedResponse[Expense])
async def get_all_expenses(
    db: AsyncSession = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    budget_id: Optional[UUID] = Query(None, alias="budgetId"),
    user_id: Optional[UUID] = Query(None, alias="userId"),
    expense_status: Optional[ExpenseStatus] = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
):
    """Get expenses visible to the current user, newest first."""
    return await ExpenseService.get_all(
        db,
        actor,
        pagination,
        budget_id=budget_id,
        user_id=user_id,
        status=expense_status,
        transform=Expense.model_validate,
    )


@router.get("/{expense_id}", response_model=ApiResponse[Expense])
async def get_expense(
    expense_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    expense = await ExpenseService.get_visible(db, expense_id, actor)
    return ApiResponse(data=Expense.model_validate(expense))


@router.patch("/{expense_id}", response_model=ApiResponse[Expense])
async def update_expense(
    expense_id: UUID,
    expense_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """
    Edit a pending expense.

    Args:
        expense_id: Expense ID
        expense_in: Fields to change
        db: Database session
        actor: Owner or in-scope ADMIN/MANAGER

    Returns:
        Updated expense
    """
    logger.info(f"Expense update requested for ID: {expense_id} by: {actor.id}")
    expense = await ExpenseService.update(db, expense_id, expense_in, actor)
    return ApiResponse(data=Expense.model_validate(expense), message="Expense updated")


@router.patch("/{expense_id}/approve", response_model=ApiResponse[Expense])
async def approve_expense(
    expense_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
    coordinator: ApprovalCoordinator = Depends(get_approval_coordinator),
):
    """Approve a pending expense; repeating the call is harmless."""
    outcome = await coordinator.approve(db, expense_id, actor)
    return outcome_response(outcome, "Expense approved")


@router.patch("/{expense_id}/reject", response_model=ApiResponse[Expense])
async def reject_expense(
    expense_id: UUID,
    body: Optional[RejectRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
    coordinator: ApprovalCoordinator = Depends(get_approval_coordinator),
):
    """Reject a pending expense with an optional reason."""
    reason = body.reason if body else None
    outcome = await coordinator.reject(db, expense_id, actor, reason)
    return outcome_response(outcome, "Expense rejected")
