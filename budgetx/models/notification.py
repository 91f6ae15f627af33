"""
Notification model for in-app messages.

Notifications are created as side effects of the expense workflow and are
only ever touched afterwards by their recipient.
"""

import uuid
from enum import Enum as PyEnum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Enum, Uuid
from sqlalchemy.sql import func
from budgetx.models.base import Base, utcnow


class NotificationType(str, PyEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ACTION = "ACTION"


class Notification(Base):
    """In-app notification addressed to a single user."""

    __tablename__ = "notifications"

    id = Column(Uuid, default=uuid.uuid4, primary_key=True, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        Enum(NotificationType, name="notification_type"),
        nullable=False,
        default=NotificationType.INFO,
    )
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    def __repr__(self) -> str:
        """String representation of the Notification model."""
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
