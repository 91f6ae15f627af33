"""
Pydantic schemas for expenses and approval decisions.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator

from budgetx.models.expense import ExpenseStatus
from budgetx.schemas.budget import BudgetSummary
from budgetx.schemas.common import CamelModel, Money
from budgetx.schemas.user import UserSummary


class ExpenseCreate(CamelModel):
    """Schema for submitting a new expense."""

    budget_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=15, decimal_places=2)
    description: str = Field(..., min_length=1, max_length=500)
    receipt_url: Optional[str] = Field(None, max_length=500)


class ExpenseUpdate(CamelModel):
    """Editable fields of a pending expense."""

    amount: Optional[Decimal] = Field(None, gt=0, max_digits=15, decimal_places=2)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    receipt_url: Optional[str] = Field(None, max_length=500)

    @field_validator("amount", "description", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class RejectRequest(CamelModel):
    """Optional body of a rejection."""

    reason: Optional[str] = Field(None, max_length=1000)


class Expense(CamelModel):
    """Schema for expense response data with populated references."""

    id: UUID
    budget_id: UUID
    user_id: UUID
    amount: Money
    description: str
    receipt_url: Optional[str] = None
    status: ExpenseStatus
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    budget: Optional[BudgetSummary] = None
    user: Optional[UserSummary] = None
    approver: Optional[UserSummary] = None
