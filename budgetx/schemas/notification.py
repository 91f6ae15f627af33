"""
Pydantic schemas for notifications.
"""

from typing import Optional
from datetime import datetime
from uuid import UUID

from budgetx.models.notification import NotificationType
from budgetx.schemas.common import CamelModel


class Notification(CamelModel):
    """Schema for notification response data."""

    id: UUID
    user_id: UUID
    title: str
    message: str
    type: NotificationType
    read: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
