"""
Pydantic schemas for users and the authenticated actor.
"""

from typing import Optional
from uuid import UUID

from pydantic import ConfigDict

from budgetx.models.user import Role
from budgetx.schemas.common import CamelModel


class Actor(CamelModel):
    """
    The authenticated caller, threaded explicitly through every operation
    that needs to know who is acting.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: Role
    department_id: Optional[UUID] = None
    name: str = ""


class TokenData(CamelModel):
    """Claims extracted from a bearer token."""

    subject: Optional[str] = None


class UserSummary(CamelModel):
    """Populated user reference (owner, submitter, approver)."""

    id: UUID
    name: str
    email: str


class DepartmentSummary(CamelModel):
    id: UUID
    name: str
    code: str


class CategorySummary(CamelModel):
    id: UUID
    name: str
