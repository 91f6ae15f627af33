"""
Service layer for notifications.

``NotificationService`` holds the recipient-facing operations (list, mark
read, delete). ``NotificationEmitter`` is the best-effort side channel used by
the expense workflow: it writes through its own session so a failed
notification never rolls back, or fails, the operation that triggered it.
"""

from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from budgetx.core.config import settings
from budgetx.core.exceptions import NotFoundError
from budgetx.core.logging import logger
from budgetx.models.notification import Notification, NotificationType
from budgetx.models.user import Role, User
from budgetx.utils.pagination import PaginationParams, paginate_query


def _format_amount(amount: Decimal) -> str:
    return f"${Decimal(amount):,.2f}"


class NotificationService:
    """Service class for notification operations."""

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: UUID,
        pagination: PaginationParams,
        read: Optional[bool] = None,
        transform=None,
    ):
        query = select(Notification).where(Notification.user_id == user_id)
        if read is not None:
            query = query.where(Notification.read == read)
        return await paginate_query(
            db, query, pagination, order_by=Notification.created_at.desc(), transform=transform
        )

    @staticmethod
    async def unread_count(db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                and_(Notification.user_id == user_id, Notification.read.is_(False))
            )
        )
        return result.scalar() or 0

    @staticmethod
    async def mark_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> Notification:
        """
        Mark one of the recipient's notifications as read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else
        """
        result = await db.execute(
            update(Notification)
            .where(and_(Notification.id == notification_id, Notification.user_id == user_id))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError("Notification", notification_id)
        await db.commit()

        refreshed = await db.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .execution_options(populate_existing=True)
        )
        return refreshed.scalars().one()

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            update(Notification)
            .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        logger.info(f"Marked {result.rowcount} notifications read for user {user_id}")
        return result.rowcount

    @staticmethod
    async def delete(db: AsyncSession, user_id: UUID, notification_id: UUID) -> None:
        result = await db.execute(
            delete(Notification)
            .where(and_(Notification.id == notification_id, Notification.user_id == user_id))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise NotFoundError("Notification", notification_id)
        await db.commit()
        logger.info(f"Deleted notification {notification_id} for user {user_id}")


class NotificationEmitter:
    """
    Fire-and-forget notification dispatch.

    Every public method returns normally; failures are logged and reported
    through the boolean result only.
    """

    def __init__(self, session_factory: async_sessionmaker, enabled: Optional[bool] = None):
        self.session_factory = session_factory
        self.enabled = settings.notifications.enabled if enabled is None else enabled

    async def emit(
        self,
        recipient_id: UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> bool:
        return await self.emit_many([recipient_id], title, message, type) == 1

    async def emit_many(
        self,
        recipient_ids: Iterable[UUID],
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
    ) -> int:
        """
        Create the same notification for several recipients in one commit.

        Returns:
            Number of notifications written (0 on failure)
        """
        recipients = list(dict.fromkeys(recipient_ids))
        if not self.enabled or not recipients:
            return 0
        try:
            async with self.session_factory() as session:
                session.add_all(
                    Notification(user_id=rid, title=title, message=message, type=type)
                    for rid in recipients
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to create notification '{title}' for {recipients}: {e}")
            return 0
        logger.debug(f"Notification '{title}' sent to {len(recipients)} recipient(s)")
        return len(recipients)

    async def find_approvers(
        self, department_id: UUID, exclude_user_id: Optional[UUID] = None
    ) -> List[UUID]:
        """Active managers of the department plus every active admin."""
        try:
            async with self.session_factory() as session:
                query = select(User.id).where(
                    User.is_active.is_(True),
                    (User.role == Role.ADMIN.value)
                    | ((User.role == Role.MANAGER.value) & (User.department_id == department_id)),
                )
                if exclude_user_id is not None:
                    query = query.where(User.id != exclude_user_id)
                result = await session.execute(query)
                return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to resolve approvers for department {department_id}: {e}")
            return []

    async def find_department_members(
        self, department_id: UUID, exclude_user_id: Optional[UUID] = None
    ) -> List[UUID]:
        try:
            async with self.session_factory() as session:
                query = select(User.id).where(
                    User.is_active.is_(True), User.department_id == department_id
                )
                if exclude_user_id is not None:
                    query = query.where(User.id != exclude_user_id)
                result = await session.execute(query)
                return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to resolve members of department {department_id}: {e}")
            return []

    async def expense_approved(self, user_id: UUID, amount: Decimal, budget_name: str) -> bool:
        return await self.emit(
            user_id,
            "Expense Approved",
            f"Your expense of {_format_amount(amount)} for {budget_name} has been approved.",
            NotificationType.INFO,
        )

    async def expense_rejected(
        self, user_id: UUID, amount: Decimal, budget_name: str, reason: Optional[str] = None
    ) -> bool:
        message = f"Your expense of {_format_amount(amount)} for {budget_name} has been rejected."
        if reason:
            message += f" Reason: {reason}"
        return await self.emit(user_id, "Expense Rejected", message, NotificationType.WARNING)

    async def pending_approval(
        self,
        department_id: UUID,
        submitter_id: UUID,
        submitter_name: str,
        amount: Decimal,
        description: str,
    ) -> int:
        approvers = await self.find_approvers(department_id, exclude_user_id=submitter_id)
        return await self.emit_many(
            approvers,
            "Expense Awaiting Approval",
            f"{submitter_name} submitted an expense of {_format_amount(amount)} "
            f"for \"{description}\" that requires your approval.",
            NotificationType.ACTION,
        )

    async def budget_created(
        self, department_id: UUID, creator_id: UUID, budget_name: str, amount: Decimal
    ) -> int:
        members = await self.find_department_members(department_id, exclude_user_id=creator_id)
        return await self.emit_many(
            members,
            "New Budget Created",
            f"A new budget \"{budget_name}\" with {_format_amount(amount)} "
            f"has been created for your department.",
            NotificationType.INFO,
        )

    async def budget_limit_warning(self, owner_id: UUID, budget_name: str, percentage: int) -> bool:
        return await self.emit(
            owner_id,
            "Budget Limit Warning",
            f"Budget \"{budget_name}\" has reached {percentage}% of its limit. "
            f"Please monitor your spending.",
            NotificationType.WARNING,
        )
