"""
User model for authorization.
This module defines the SQLAlchemy model for users who submit and approve expenses.
"""
import uuid
from enum import Enum as PyEnum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from budgetx.models.base import Base, utcnow


class Role(str, PyEnum):
    """User roles, from most to least privileged."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class User(Base):
    """
    User model representing system users.

    Users carry a role (ADMIN, MANAGER, USER) and an optional department
    which scopes what they can see and approve.
    """

    __tablename__ = "users"

    id = Column(Uuid, default=uuid.uuid4, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default=Role.USER.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    department = relationship("Department", back_populates="users", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the User model."""
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
