"""
Configuration for pytest.

This module provides fixtures and configuration for running tests. Every test
gets its own SQLite file so concurrent sessions see real locking.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./budgetx_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from budgetx.core.deps import get_notification_emitter
from budgetx.core.security import create_access_token
from budgetx.db.session import get_db
from budgetx.main import app
from budgetx.models import (
    Base,
    Budget,
    BudgetPeriod,
    BudgetStatus,
    Category,
    Department,
    Expense,
    ExpenseStatus,
    Role,
    User,
)
from budgetx.schemas.user import Actor
from budgetx.services.approval import ApprovalCoordinator
from budgetx.services.notification import NotificationEmitter


@pytest.fixture
async def engine(tmp_path):
    """Create a throwaway database with all tables."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'budgetx.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def emitter(session_factory):
    return NotificationEmitter(session_factory, enabled=True)


@pytest.fixture
def coordinator(emitter):
    return ApprovalCoordinator(emitter, warning_threshold=80)


@pytest.fixture
async def async_client(session_factory):
    """Create an async test client bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_emitter] = lambda: NotificationEmitter(
        session_factory, enabled=True
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=Role(user.role), department_id=user.department_id, name=user.name)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def expense_factory(session_factory):
    """Insert an expense directly, bypassing the service layer."""

    async def create(
        budget: Budget,
        user: User,
        amount: str = "150.00",
        status: ExpenseStatus = ExpenseStatus.PENDING,
    ) -> Expense:
        expense = Expense(
            budget_id=budget.id,
            user_id=user.id,
            amount=Decimal(amount),
            description="Conference travel",
            status=status,
        )
        async with session_factory() as db:
            db.add(expense)
            await db.commit()
        return expense

    return create


@pytest.fixture
async def seed(session_factory):
    """
    Two departments, one user of every role, and an Engineering budget of
    1000.00 with 200.00 already spent.

    Created through a separate session, so the returned objects are detached
    and unaffected by rollbacks in the session under test.
    """
    async with session_factory() as db:
        engineering = Department(name="Engineering", code="ENG")
        operations = Department(name="Operations", code="OPS")
        category = Category(name="Travel")
        db.add_all([engineering, operations, category])
        await db.flush()

        admin = User(name="Ada Admin", email="admin@example.com", role=Role.ADMIN.value)
        manager = User(
            name="Morgan Manager", email="manager@example.com",
            role=Role.MANAGER.value, department_id=engineering.id,
        )
        other_manager = User(
            name="Olive Ops", email="ops.manager@example.com",
            role=Role.MANAGER.value, department_id=operations.id,
        )
        employee = User(
            name="Sam Staff", email="staff@example.com",
            role=Role.USER.value, department_id=engineering.id,
        )
        outsider = User(
            name="Riley Remote", email="remote@example.com",
            role=Role.USER.value, department_id=operations.id,
        )
        db.add_all([admin, manager, other_manager, employee, outsider])
        await db.flush()

        budget = Budget(
            name="Engineering Travel",
            department_id=engineering.id,
            category_id=category.id,
            owner_id=manager.id,
            amount=Decimal("1000.00"),
            spent=Decimal("200.00"),
            period=BudgetPeriod.YEARLY,
            start_date=date(2026, 1, 1),
            end_date=date(2026, 12, 31),
            status=BudgetStatus.ACTIVE,
        )
        ops_budget = Budget(
            name="Operations Supplies",
            department_id=operations.id,
            category_id=category.id,
            owner_id=other_manager.id,
            amount=Decimal("500.00"),
            spent=Decimal("0.00"),
            period=BudgetPeriod.QUARTERLY,
            start_date=date(2026, 1, 1),
            end_date=date(2026, 3, 31),
            status=BudgetStatus.ACTIVE,
        )
        db.add_all([budget, ops_budget])
        await db.commit()

    return SimpleNamespace(
        engineering=engineering,
        operations=operations,
        category=category,
        admin=admin,
        manager=manager,
        other_manager=other_manager,
        employee=employee,
        outsider=outsider,
        budget=budget,
        ops_budget=ops_budget,
    )
