"""
Department and category models.

Departments scope budgets and users; categories classify budgets. Both are
maintained elsewhere and only read by the approval workflow.
"""
import uuid
from sqlalchemy import Column, String, DateTime, Text, Boolean, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from budgetx.models.base import Base, utcnow


class Department(Base):
    """Organizational unit that owns budgets and groups users."""

    __tablename__ = "departments"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True, index=True)
    code = Column(String(20), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    users = relationship(
        "User",
        back_populates="department",
        foreign_keys="[User.department_id]",
    )

    def __repr__(self) -> str:
        """String representation of the Department model."""
        return f"<Department(id={self.id}, name='{self.name}', code='{self.code}')>"


class Category(Base):
    """Spending category a budget is allocated for."""

    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
