from typing import Any, Callable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from budgetx.core.logging import logger
from budgetx.schemas.common import PaginatedResponse


class PaginationParams:
    """Parameters for pagination."""

    def __init__(self, page: int = 1, limit: int = 20):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


async def paginate_query(
    db: AsyncSession,
    query: Any,
    pagination: PaginationParams,
    order_by: Any = None,
    transform: Optional[Callable[[Any], Any]] = None,
) -> PaginatedResponse[Any]:
    """
    Paginate an ORM select, newest first unless ``order_by`` says otherwise.

    Args:
        db: Database session
        query: SQLAlchemy select query returning ORM entities
        pagination: Pagination parameters
        order_by: Optional ordering clause
        transform: Optional callable applied to every row (e.g. schema validation)
    """
    try:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await db.execute(count_query)).scalar() or 0

        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query.offset(pagination.offset).limit(pagination.limit))
        items = list(result.scalars().all())
        if transform is not None:
            items = [transform(item) for item in items]

        total_pages = (total + pagination.limit - 1) // pagination.limit if total else 0

        return PaginatedResponse(
            data=items,
            total=total,
            page=pagination.page,
            limit=pagination.limit,
            total_pages=total_pages,
            has_next_page=pagination.page < total_pages,
            has_prev_page=pagination.page > 1,
        )
    except Exception as e:
        logger.error(f"Error in paginate_query: {str(e)}")
        raise
