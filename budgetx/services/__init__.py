"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from budgetx.services.approval import ApprovalCoordinator, ApprovalOutcome
from budgetx.services.budget import BudgetService
from budgetx.services.expense import ExpenseService
from budgetx.services.notification import NotificationEmitter, NotificationService

__all__ = [
    "ApprovalCoordinator",
    "ApprovalOutcome",
    "BudgetService",
    "ExpenseService",
    "NotificationEmitter",
    "NotificationService",
]
