"""Pytest fixtures for attendance payroll tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from attendance_payroll.clock import FixedClock
from attendance_payroll.config import CorrectionPolicyConfig, PayrollPolicy
from attendance_payroll.domain import (
    AttendanceRecord,
    AttendanceStatus,
    Department,
    Employee,
)
from attendance_payroll.services import AttendanceService, CorrectionPolicy, SalaryService
from attendance_payroll.stores import InMemoryAttendanceStore, InMemoryEmployeeDirectory

# Monday 19 October 2026, 10:00 UTC. The correction window is 12..18 October.
NOW = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def at(day: date, hour: int, minute: int = 0) -> datetime:
    """Aware UTC timestamp on a given day."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


def present(employee_id: str, day: date, overtime: str | None = None) -> AttendanceRecord:
    """A completed 09:00-17:00 day."""
    return AttendanceRecord(
        employee_id=employee_id,
        work_date=day,
        status=AttendanceStatus.PRESENT,
        entry_time=at(day, 9),
        exit_time=at(day, 17),
        overtime_hours=Decimal(overtime) if overtime is not None else Decimal("0.00"),
    )


DEPARTMENTS = [
    Department(id="ENG", name="Engineering"),
    Department(id="OPS", name="Operations"),
    Department(id="OLD", name="Legacy", is_active=False),
]

EMPLOYEES = [
    Employee(
        id="E001",
        employee_code="EMP-001",
        name="Alice Moreau",
        department_id="ENG",
        monthly_salary=Decimal("31000.00"),
        overtime_eligible=True,
    ),
    Employee(
        id="E002",
        employee_code="EMP-002",
        name="Bruno Silva",
        department_id="ENG",
        monthly_salary=Decimal("24800.00"),
    ),
    Employee(
        id="E003",
        employee_code="EMP-003",
        name="Chidi Okafor",
        department_id="OPS",
        monthly_salary=Decimal("15500.00"),
        overtime_eligible=True,
    ),
    Employee(
        id="E004",
        employee_code="EMP-004",
        name="Dana Kowalski",
        department_id="ENG",
        monthly_salary=Decimal("20000.00"),
        is_active=False,
    ),
    Employee(
        id="E005",
        employee_code="EMP-005",
        name="Emeka Bello",
        department_id="OLD",
        monthly_salary=Decimal("18000.00"),
    ),
]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def directory() -> InMemoryEmployeeDirectory:
    return InMemoryEmployeeDirectory(list(EMPLOYEES), list(DEPARTMENTS))


@pytest.fixture
def store() -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore()


@pytest.fixture
def payroll_policy() -> PayrollPolicy:
    return PayrollPolicy()


@pytest.fixture
def correction_policy(payroll_policy: PayrollPolicy) -> CorrectionPolicy:
    return CorrectionPolicy(CorrectionPolicyConfig(), payroll_policy)


@pytest.fixture
def attendance_service(store, directory, clock, correction_policy) -> AttendanceService:
    return AttendanceService(store, directory, clock, policy=correction_policy)


@pytest.fixture
def salary_service(store, directory, clock, payroll_policy) -> SalaryService:
    return SalaryService(store, directory, clock, policy=payroll_policy, concurrency=2)
