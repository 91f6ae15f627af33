"""
Shared schema building blocks.

The API speaks camelCase JSON while the code stays snake_case; every schema
derives from ``CamelModel`` so both spellings are accepted on input.
"""

from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Decimals travel as JSON numbers.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases and ORM attribute loading."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Response envelope ``{success, data?, message?}``."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class PaginatedResponse(CamelModel, Generic[T]):
    """Envelope for paginated list endpoints."""

    success: bool = True
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class UnreadCount(CamelModel):
    unread_count: int
