"""Salary service - on-demand payroll calculations and reports.

Nothing is cached: every request re-reads the attendance store so that
results always reflect the latest corrections.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, TypeVar

from attendance_payroll.calculators.aggregator import MonthlyAggregator, month_bounds
from attendance_payroll.calculators.payroll_calculator import PayrollCalculator
from attendance_payroll.calculators.rollup import roll_up_department, roll_up_system
from attendance_payroll.calculators.types import (
    DepartmentSalaryReport,
    SalaryCalculation,
    SystemSalaryReport,
)
from attendance_payroll.clock import Clock
from attendance_payroll.config import PayrollPolicy
from attendance_payroll.domain import Employee
from attendance_payroll.errors import (
    DeadlineExceededError,
    DepartmentNotFoundError,
    EmployeeNotFoundError,
    InvalidRequestError,
)
from attendance_payroll.stores.base import AttendanceStore, EmployeeDirectory

logger = logging.getLogger(__name__)

T = TypeVar("T")

SORT_KEYS: dict[str, Callable[[SalaryCalculation], Any]] = {
    "name": lambda c: (c.employee_name.lower(), c.employee_id),
    "department": lambda c: (c.department_id or "", c.employee_name.lower(), c.employee_id),
    "salary": lambda c: (c.calculated_salary, c.employee_id),
    "attendance": lambda c: (c.attendance_percentage, c.employee_id),
}


class SalaryService:
    """Caller-facing payroll queries.

    Per-employee calculations are independent and side-effect free, so
    reports fan out across employees (bounded by ``concurrency``) and fan
    back in through the pure roll-up functions. An optional deadline
    cancels the whole fan-out.
    """

    def __init__(
        self,
        store: AttendanceStore,
        directory: EmployeeDirectory,
        clock: Clock,
        policy: PayrollPolicy | None = None,
        concurrency: int = 8,
        deadline_seconds: float | None = None,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.directory = directory
        self.aggregator = MonthlyAggregator(store, clock)
        self.calculator = PayrollCalculator(policy)
        self.concurrency = concurrency
        self.deadline_seconds = deadline_seconds

    async def calculate_salary(
        self,
        employee_id: str,
        year: int,
        month: int,
        strict: bool = True,
    ) -> SalaryCalculation:
        """Salary of one employee. strict=False is the audit mode for inactive staff."""
        month_bounds(year, month)
        employee = await self.directory.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        aggregate = await self.aggregator.aggregate(employee_id, year, month)
        return self.calculator.calculate(employee, aggregate, strict=strict)

    async def get_department_report(
        self,
        department_id: str,
        year: int,
        month: int,
    ) -> DepartmentSalaryReport:
        month_bounds(year, month)
        if await self.directory.get_department(department_id) is None:
            raise DepartmentNotFoundError(department_id)

        async def build() -> DepartmentSalaryReport:
            employees = await self.directory.list_employees(
                department_id=department_id, is_active=True
            )
            calculations = await self._calculate_many(employees, year, month)
            return roll_up_department(department_id, year, month, calculations)

        return await self._with_deadline("department_report", build)

    async def get_system_report(self, year: int, month: int) -> SystemSalaryReport:
        month_bounds(year, month)

        async def build() -> SystemSalaryReport:
            departments = await self.directory.list_departments(is_active=True)
            department_ids = {d.id for d in departments}
            employees = [
                e
                for e in await self.directory.list_employees(is_active=True)
                if e.department_id in department_ids
            ]
            calculations = await self._calculate_many(employees, year, month)

            by_department: dict[str | None, list[SalaryCalculation]] = defaultdict(list)
            for calculation in calculations:
                by_department[calculation.department_id].append(calculation)

            reports = [
                roll_up_department(d.id, year, month, by_department.get(d.id, []))
                for d in departments
            ]
            return roll_up_system(year, month, reports)

        return await self._with_deadline("system_report", build)

    async def list_salaries(
        self,
        year: int,
        month: int,
        department_id: str | None = None,
        sort_by: str = "name",
        descending: bool = False,
    ) -> list[SalaryCalculation]:
        """Salaries of active employees, optionally filtered and sorted."""
        month_bounds(year, month)
        if sort_by not in SORT_KEYS:
            raise InvalidRequestError("sort_by", f"must be one of {sorted(SORT_KEYS)}")

        async def build() -> list[SalaryCalculation]:
            employees = await self.directory.list_employees(
                department_id=department_id, is_active=True
            )
            calculations = await self._calculate_many(employees, year, month)
            return sorted(calculations, key=SORT_KEYS[sort_by], reverse=descending)

        return await self._with_deadline("list_salaries", build)

    async def _calculate_many(
        self,
        employees: list[Employee],
        year: int,
        month: int,
    ) -> list[SalaryCalculation]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def one(employee: Employee) -> SalaryCalculation:
            async with semaphore:
                aggregate = await self.aggregator.aggregate(employee.id, year, month)
            return self.calculator.calculate(employee, aggregate)

        tasks = [asyncio.ensure_future(one(e)) for e in employees]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def _with_deadline(
        self,
        operation: str,
        build: Callable[[], Awaitable[T]],
    ) -> T:
        if self.deadline_seconds is None:
            return await build()
        try:
            return await asyncio.wait_for(build(), timeout=self.deadline_seconds)
        except asyncio.TimeoutError:
            logger.warning("%s exceeded its %ss deadline", operation, self.deadline_seconds)
            raise DeadlineExceededError(operation, self.deadline_seconds)
