"""
Notification endpoints.

Every route works on the current user's own notifications only; another
user's notification is reported as not found.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from budgetx.core.auth import get_current_actor
from budgetx.core.deps import get_pagination_params
from budgetx.db.session import get_db
from budgetx.schemas.common import ApiResponse, PaginatedResponse, UnreadCount
from budgetx.schemas.notification import Notification
from budgetx.schemas.user import Actor
from budgetx.services.notification import NotificationService
from budgetx.utils.pagination import PaginationParams

router = APIRouter()


@router.get("", response_model=PaginatedResponse[Notification])
async def get_notifications(
    db: AsyncSession = Depends(get_db),
    pagination: PaginationParams = Depends(get_pagination_params),
    read: Optional[bool] = Query(None, description="Filter by read state"),
    actor: Actor = Depends(get_current_actor),
):
    """
    Get the current user's notifications, newest first.

    Args:
        db: Database session
        pagination: Page and limit
        read: Optional read-state filter
        actor: Current user

    Returns:
        Paginated notifications
    """
    return await NotificationService.list_for_user(
        db, actor.id, pagination, read, transform=Notification.model_validate
    )


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return UnreadCount(unread_count=await NotificationService.unread_count(db, actor.id))


@router.patch("/mark-all-read", response_model=ApiResponse[int])
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    updated = await NotificationService.mark_all_read(db, actor.id)
    return ApiResponse(data=updated, message="All notifications marked as read")


@router.patch("/{notification_id}/read", response_model=ApiResponse[Notification])
async def mark_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notification = await NotificationService.mark_read(db, actor.id, notification_id)
    return ApiResponse(data=Notification.model_validate(notification))


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await NotificationService.delete(db, actor.id, notification_id)
    return ApiResponse(message="Notification deleted")
