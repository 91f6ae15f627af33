"""
Pydantic schemas for budgets.

This module defines the request and response schemas for budget-related
API endpoints using Pydantic models.
"""

from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from budgetx.models.budget import BudgetPeriod, BudgetStatus
from budgetx.schemas.common import CamelModel, Money
from budgetx.schemas.user import CategorySummary, DepartmentSummary, UserSummary


class BudgetBase(CamelModel):
    """Base schema for budget data."""

    name: str = Field(..., min_length=1, max_length=150)
    department_id: UUID
    category_id: UUID
    amount: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    period: BudgetPeriod
    start_date: date
    end_date: date


class BudgetCreate(BudgetBase):
    """Schema for creating a new budget."""

    owner_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class BudgetUpdate(CamelModel):
    """
    Schema for updating a budget.

    ``spent`` only moves through expense approval.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    category_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=15, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name", "category_id", "amount", "period", "start_date", "end_date", mode="before")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class Budget(CamelModel):
    """Schema for budget response data."""

    id: UUID
    name: str
    department_id: UUID
    category_id: UUID
    owner_id: UUID
    amount: Money
    spent: Money
    remaining: Money
    period: BudgetPeriod
    start_date: date
    end_date: date
    status: BudgetStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    department: Optional[DepartmentSummary] = None
    category: Optional[CategorySummary] = None
    owner: Optional[UserSummary] = None


class BudgetSummary(CamelModel):
    """Budget reference populated on expenses."""

    id: UUID
    name: str
    department_id: UUID
    category_id: UUID
