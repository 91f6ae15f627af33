"""
Budget model for departmental spending allocations.

This module defines the SQLAlchemy model for budgets. ``amount`` is the
allocated ceiling and ``spent`` the running total of approved expenses;
``remaining`` is derived and never stored.
"""

import uuid
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, String, Date, DateTime, Numeric, ForeignKey, Enum, Uuid, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from budgetx.models.base import Base, utcnow


class BudgetPeriod(str, PyEnum):
    """Length of the budget cycle."""

    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class BudgetStatus(str, PyEnum):
    """Budgets are archived, never deleted."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class Budget(Base):
    """
    Budget model representing an allocation for a department and category.

    ``spent`` is only ever mutated through the ledger increment performed when
    an expense is approved.
    """

    __tablename__ = "budgets"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_budgets_amount_non_negative"),
        CheckConstraint("spent >= 0", name="ck_budgets_spent_non_negative"),
        Index("ix_budgets_department_category_status", "department_id", "category_id", "status"),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    department_id = Column(Uuid, ForeignKey("departments.id"), nullable=False)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    spent = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    period = Column(Enum(BudgetPeriod, name="budget_period"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(
        Enum(BudgetStatus, name="budget_status"),
        nullable=False,
        default=BudgetStatus.ACTIVE,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    department = relationship("Department", lazy="selectin")
    category = relationship("Category", lazy="selectin")
    owner = relationship("User", lazy="selectin")

    @property
    def remaining(self) -> Decimal:
        """Allocated amount not yet consumed by approved expenses."""
        return Decimal(self.amount) - Decimal(self.spent or 0)

    def __repr__(self) -> str:
        """String representation of the Budget model."""
        return (
            f"<Budget(id={self.id}, "
            f"department_id={self.department_id}, "
            f"amount={self.amount}, spent={self.spent})>"
        )
