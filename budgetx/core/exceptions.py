"""
Typed exception hierarchy for the expense approval workflow.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
the API layer answers with, so routers never have to parse messages.

    BudgetXError (base)
    |
    +-- NotFoundError          404
    +-- ForbiddenError         403
    +-- ValidationError        400
    +-- InvalidStateError      409
    +-- DataIntegrityError     500
"""

from typing import Any, Optional


class BudgetXError(Exception):
    """Base exception for all domain errors."""

    code: str = "BUDGETX_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(BudgetXError):
    """A referenced expense, budget or notification does not resolve."""

    code: str = "NOT_FOUND"
    status_code: int = 404

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found", {"id": str(resource_id)})


class ForbiddenError(BudgetXError):
    """The actor's role or department scope does not permit the action."""

    code: str = "FORBIDDEN"
    status_code: int = 403


class ValidationError(BudgetXError):
    """Malformed or semantically invalid input."""

    code: str = "VALIDATION_ERROR"
    status_code: int = 400


class InvalidStateError(BudgetXError):
    """Transition requested on an expense that is no longer pending."""

    code: str = "INVALID_STATE"
    status_code: int = 409

    def __init__(self, message: str, current_status: Optional[str] = None):
        self.current_status = current_status
        super().__init__(
            message,
            {"current_status": current_status} if current_status else None,
        )


class DataIntegrityError(BudgetXError):
    """Persisted data references something that no longer exists."""

    code: str = "DATA_INTEGRITY_ERROR"
    status_code: int = 500
