"""Integration test fixtures with a real (SQLite) database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from attendance_payroll.api.app import create_app
from attendance_payroll.clock import FixedClock
from attendance_payroll.config import Settings
from attendance_payroll.database import create_tables, get_engine, make_session_factory
from attendance_payroll.models import DepartmentRow, EmployeeRow
from attendance_payroll.stores import SqlAttendanceStore, SqlEmployeeDirectory

from ..conftest import DEPARTMENTS, EMPLOYEES, NOW


def database_url(tmp_path: Path) -> str:
    # One file per test: in-memory SQLite is not shared between pooled connections
    return f"sqlite+aiosqlite:///{tmp_path / 'attendance.db'}"


def make_settings(url: str) -> Settings:
    return Settings(database_url=url, host="127.0.0.1", port=8000, debug=False)


async def seed_master_data(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Insert the shared departments and employees."""
    async with session_factory() as session:
        async with session.begin():
            session.add_all(
                DepartmentRow(department_id=d.id, name=d.name, is_active=d.is_active)
                for d in DEPARTMENTS
            )
            await session.flush()
            session.add_all(
                EmployeeRow(
                    employee_id=e.id,
                    employee_code=e.employee_code,
                    name=e.name,
                    department_id=e.department_id,
                    monthly_salary=e.monthly_salary,
                    overtime_eligible=e.overtime_eligible,
                    is_active=e.is_active,
                )
                for e in EMPLOYEES
            )


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return database_url(tmp_path)


@pytest_asyncio.fixture
async def engine(db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with all tables."""
    engine = get_engine(db_url)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    factory = make_session_factory(engine)
    await seed_master_data(factory)
    return factory


@pytest.fixture
def sql_store(session_factory) -> SqlAttendanceStore:
    return SqlAttendanceStore(session_factory, timeout_seconds=5.0)


@pytest.fixture
def sql_directory(session_factory) -> SqlEmployeeDirectory:
    return SqlEmployeeDirectory(session_factory, timeout_seconds=5.0)


@pytest_asyncio.fixture
async def client(db_url, session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    app = create_app(
        make_settings(db_url),
        clock=FixedClock(NOW),
        session_factory=session_factory,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
