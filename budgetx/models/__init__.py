"""
Models package initialization.

This module imports all models to ensure they are registered with SQLAlchemy.
"""

from budgetx.models.base import Base

from budgetx.models.user import User, Role
from budgetx.models.department import Department, Category
from budgetx.models.budget import Budget, BudgetPeriod, BudgetStatus
from budgetx.models.expense import Expense, ExpenseStatus
from budgetx.models.notification import Notification, NotificationType


__all__ = [
    "Base",
    "User",
    "Role",
    "Department",
    "Category",
    "Budget",
    "BudgetPeriod",
    "BudgetStatus",
    "Expense",
    "ExpenseStatus",
    "Notification",
    "NotificationType",
]
