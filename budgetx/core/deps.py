"""
Dependencies for FastAPI endpoints.

This module provides dependencies for pagination, role gates and the
notification side channel.
"""

from fastapi import Depends, HTTPException, Query, status

from budgetx.core.auth import get_current_actor
from budgetx.core.config import settings
from budgetx.core.logging import logger
from budgetx.db.session import get_session_factory
from budgetx.models.user import Role
from budgetx.schemas.user import Actor
from budgetx.services.approval import ApprovalCoordinator
from budgetx.services.notification import NotificationEmitter
from budgetx.utils.pagination import PaginationParams


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(
        settings.pagination.default_limit,
        ge=1,
        le=settings.pagination.max_limit,
        description="Page size",
    ),
) -> PaginationParams:
    """
    Get pagination parameters from request query.

    Returns:
        PaginationParams object with extracted values
    """
    return PaginationParams(page=page, limit=limit)


def require_roles(*roles: Role):
    """
    Create a dependency to check if the actor has one of the given roles.

    Args:
        roles: Allowed roles

    Returns:
        Dependency function
    """
    allowed = frozenset(roles)

    async def role_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            logger.warning(
                f"Role access denied: actor {actor.id} ({actor.role.value}) "
                f"attempted to access resource requiring {sorted(r.value for r in allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return actor

    return role_dependency


def get_notification_emitter() -> NotificationEmitter:
    return NotificationEmitter(get_session_factory())


def get_approval_coordinator(
    emitter: NotificationEmitter = Depends(get_notification_emitter),
) -> ApprovalCoordinator:
    return ApprovalCoordinator(emitter)
