"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (menu access, payroll, client, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hris.auth.service import open_session
from hris.common.constants import AttendanceStatus, MaritalStatus, UserRole
from hris.database import Base, get_db
from hris.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
# (e.g. User → UserSession, MenuAccessOverride)
import hris.attendance.models  # noqa: F401
import hris.auth.models  # noqa: F401
import hris.common.audit  # noqa: F401
import hris.core_hr.models  # noqa: F401
import hris.menu_access.models  # noqa: F401
import hris.payroll.models  # noqa: F401
import hris.salary.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/BLOB ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and uuid_generate_v4() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
    dbapi_conn.create_function(
        "uuid_generate_v4", 0, lambda: str(uuid.uuid4()),
    )

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hris.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    name: str = "Test User",
    email: str | None = None,
    role: UserRole = UserRole.employee,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        email=email or f"user.{uuid.uuid4().hex[:8]}@hris.local",
        role=role,
        is_active=True,
    )


def _make_employee(
    *,
    user_id: uuid.UUID,
    marital_status: MaritalStatus = MaritalStatus.lajang,
    dependents: int = 0,
    join_date: date = date(2023, 1, 16),
) -> dict:
    return dict(
        id=uuid.uuid4(),
        user_id=user_id,
        employee_number=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        marital_status=marital_status,
        dependents=dependents,
        join_date=join_date,
        is_active=True,
    )


def _make_salary(
    *,
    employee_id: uuid.UUID,
    basic_salary: Decimal = Decimal("5000000"),
    transport_allowance: Decimal = Decimal("300000"),
    meal_allowance: Decimal = Decimal("200000"),
    bpjs_kes_employee: Decimal = Decimal("50000"),
    bpjs_tk_jht_employee: Decimal = Decimal("100000"),
    bpjs_tk_jp_employee: Decimal = Decimal("50000"),
    effective_date: date = date(2024, 1, 1),
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_id=employee_id,
        basic_salary=basic_salary,
        transport_allowance=transport_allowance,
        meal_allowance=meal_allowance,
        housing_allowance=Decimal("0"),
        position_allowance=Decimal("0"),
        bpjs_kes_employee=bpjs_kes_employee,
        bpjs_kes_company=Decimal("200000"),
        bpjs_tk_jht_employee=bpjs_tk_jht_employee,
        bpjs_tk_jht_company=Decimal("185000"),
        bpjs_tk_jkk=Decimal("12000"),
        bpjs_tk_jkm=Decimal("15000"),
        bpjs_tk_jp_employee=bpjs_tk_jp_employee,
        bpjs_tk_jp_company=Decimal("100000"),
        effective_date=effective_date,
    )


async def create_user(db: AsyncSession, **kwargs):
    from hris.core_hr.models import User

    user = User(**_make_user(**kwargs))
    db.add(user)
    await db.flush()
    return user


async def create_employee(db: AsyncSession, user, **kwargs):
    from hris.core_hr.models import Employee

    employee = Employee(**_make_employee(user_id=user.id, **kwargs))
    employee.user = user
    db.add(employee)
    await db.flush()
    return employee


async def create_salary(db: AsyncSession, employee, **kwargs):
    from hris.salary.models import EmployeeSalary

    salary = EmployeeSalary(**_make_salary(employee_id=employee.id, **kwargs))
    db.add(salary)
    await db.flush()
    return salary


async def create_attendance(
    db: AsyncSession,
    employee,
    day: date,
    status: AttendanceStatus = AttendanceStatus.hadir,
    overtime_hours: Decimal = Decimal("0"),
):
    from hris.attendance.models import AttendanceRecord

    record = AttendanceRecord(
        employee_id=employee.id,
        attendance_date=day,
        status=status,
        overtime_hours=overtime_hours,
    )
    db.add(record)
    await db.flush()
    return record


async def auth_headers_for(db: AsyncSession, user) -> dict[str, str]:
    """Bearer headers backed by a committed session for *user*.

    Committing here keeps seeded rows visible to request sessions even when
    a request later rolls back.
    """
    token = await open_session(db, user)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_user(db):
    return await create_user(db, name="Admin", role=UserRole.admin)


@pytest.fixture
async def hr_user(db):
    return await create_user(db, name="HR Officer", role=UserRole.hr)


@pytest.fixture
async def employee_user(db):
    return await create_user(db, name="Budi Santoso", role=UserRole.employee)


@pytest.fixture
async def test_employee(db, employee_user):
    """Employee record (with a salary) linked to ``employee_user``."""
    employee = await create_employee(db, employee_user)
    await create_salary(db, employee)
    return employee


@pytest.fixture
async def admin_headers(db, admin_user) -> dict[str, str]:
    return await auth_headers_for(db, admin_user)


@pytest.fixture
async def hr_headers(db, hr_user) -> dict[str, str]:
    return await auth_headers_for(db, hr_user)


@pytest.fixture
async def employee_headers(db, employee_user) -> dict[str, str]:
    return await auth_headers_for(db, employee_user)
