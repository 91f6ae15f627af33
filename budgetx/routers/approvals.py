"""
Approval queue endpoints for ADMINs and MANAGERs.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.deps import get_approval_coordinator, get_pagination_params, require_roles
from budgetx.db.session import get_db
from budgetx.models.user import Role
from budgetx.routers.expenses import outcome_response
from budgetx.schemas.common import ApiResponse, PaginatedResponse
from budgetx.schemas.expense import Expense, RejectRequest
from budgetx.schemas.user import Actor
from budgetx.services.approval import ApprovalCoordinator
from budgetx.services.expense import ExpenseService
from budgetx.utils.pagination import PaginationParams

router = APIRouter()

approver = require_roles(Role.ADMIN, Role.MANAGER)


@router.get("", response_model=PaginatedResponse[Expense])
async def get_pending_approvals(
    db: AsyncSession = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    actor: Actor = Depends(approver),
):
    """
    Get PENDING expenses in the current approver's scope, newest first.
    """
    return await ExpenseService.get_pending(
        db, actor, pagination, transform=Expense.model_validate
    )


@router.post("/{expense_id}/approve", response_model=ApiResponse[Expense])
async def approve(
    expense_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(approver),
    coordinator: ApprovalCoordinator = Depends(get_approval_coordinator),
):
    outcome = await coordinator.approve(db, expense_id, actor)
    return outcome_response(outcome, "Expense approved")


@router.post("/{expense_id}/reject", response_model=ApiResponse[Expense])
async def reject(
    expense_id: UUID,
    body: Optional[RejectRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(approver),
    coordinator: ApprovalCoordinator = Depends(get_approval_coordinator),
):
    reason = body.reason if body else None
    outcome = await coordinator.reject(db, expense_id, actor, reason)
    return outcome_response(outcome, "Expense rejected")
