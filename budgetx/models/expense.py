"""
Expense model for spend requests submitted against a budget.

Expenses start PENDING and move once to APPROVED or REJECTED. They are never
deleted so the approval history stays auditable.
"""

import uuid
from enum import Enum as PyEnum
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Enum, Uuid, Text, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from budgetx.models.base import Base, utcnow


class ExpenseStatus(str, PyEnum):
    """Lifecycle states of an expense."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Expense(Base):
    """
    Expense model representing a single spend request.

    ``approved_by`` and ``approved_at`` record whoever moved the expense out of
    PENDING, for rejections as well as approvals.
    """

    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    budget_id = Column(Uuid, ForeignKey("budgets.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(String(500), nullable=False)
    receipt_url = Column(String(500), nullable=True)
    status = Column(
        Enum(ExpenseStatus, name="expense_status"),
        nullable=False,
        default=ExpenseStatus.PENDING,
        index=True,
    )
    approved_by = Column(Uuid, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    budget = relationship("Budget", lazy="selectin")
    user = relationship("User", foreign_keys=[user_id], lazy="selectin")
    approver = relationship("User", foreign_keys=[approved_by], lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the Expense model."""
        return (
            f"<Expense(id={self.id}, "
            f"budget_id={self.budget_id}, "
            f"amount={self.amount}, "
            f"status='{self.status.value if self.status else 'N/A'}')>"
        )
