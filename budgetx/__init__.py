"""
BudgetX: departmental budgeting and expense approval API.
"""

__version__ = "1.0.0"
