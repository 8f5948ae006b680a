"""Type definitions for the aggregation and payroll pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

WARNING_INACTIVE_EMPLOYEE = "INACTIVE_EMPLOYEE"


def quantize(amount: Decimal, quantum: Decimal = CENT) -> Decimal:
    """Round half-up to the given quantum."""
    return amount.quantize(quantum, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole × 100 rounded to 0.01, or 0 when whole is 0."""
    if whole == 0:
        return quantize(ZERO)
    return quantize(part / whole * HUNDRED)


@dataclass(frozen=True)
class MonthlyAggregate:
    """Attendance tallies of one employee for one calendar month."""

    employee_id: str
    year: int
    month: int
    days_in_month: int
    days_elapsed: int
    days_present: Decimal = ZERO  # half days count 0.5
    days_absent: Decimal = ZERO  # half days count 0.5
    days_pending: int = 0
    days_half_day: int = 0
    total_overtime_hours: Decimal = ZERO

    @property
    def days_tallied(self) -> Decimal:
        return self.days_present + self.days_absent + self.days_pending


@dataclass(frozen=True)
class SalaryCalculation:
    """Salary of one employee for one month, derived from attendance."""

    employee_id: str
    employee_code: str
    employee_name: str
    department_id: str | None
    year: int
    month: int
    days_in_month: int
    days_present: Decimal
    days_absent: Decimal
    days_pending: int
    monthly_salary: Decimal
    daily_rate: Decimal
    base_salary: Decimal
    overtime_hours: Decimal
    overtime_pay: Decimal
    calculated_salary: Decimal
    employee_active: bool = True
    warnings: tuple[str, ...] = ()

    @property
    def month_label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def deduction_amount(self) -> Decimal:
        """Salary lost to absence (overtime is not netted against it)."""
        return self.monthly_salary - self.base_salary

    @property
    def deduction_percentage(self) -> Decimal:
        return percentage(self.deduction_amount, self.monthly_salary)

    @property
    def attendance_percentage(self) -> Decimal:
        return percentage(self.days_present, Decimal(self.days_in_month))

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "employee_code": self.employee_code,
            "employee_name": self.employee_name,
            "department_id": self.department_id,
            "month": self.month_label,
            "year": self.year,
            "month_number": self.month,
            "days_in_month": self.days_in_month,
            "days_present": str(self.days_present),
            "days_absent": str(self.days_absent),
            "days_pending": self.days_pending,
            "monthly_salary": str(self.monthly_salary),
            "daily_rate": str(self.daily_rate),
            "base_salary": str(self.base_salary),
            "overtime_hours": str(self.overtime_hours),
            "overtime_pay": str(self.overtime_pay),
            "calculated_salary": str(self.calculated_salary),
            "deduction_amount": str(self.deduction_amount),
            "deduction_percentage": str(self.deduction_percentage),
            "attendance_percentage": str(self.attendance_percentage),
            "employee_active": self.employee_active,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class DepartmentSalarySummary:
    total_monthly_salary: Decimal = ZERO
    total_calculated_salary: Decimal = ZERO
    total_base_salary: Decimal = ZERO
    total_overtime_pay: Decimal = ZERO
    total_deduction: Decimal = ZERO  # floored at 0
    overtime_surplus: Decimal = ZERO  # calculated beyond monthly, reported apart
    average_days_present: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {k: str(v) for k, v in self.__dict__.items()}


@dataclass(frozen=True)
class DepartmentSalaryReport:
    department_id: str
    year: int
    month: int
    employee_count: int
    salaries: list[SalaryCalculation] = field(default_factory=list)
    summary: DepartmentSalarySummary = field(default_factory=DepartmentSalarySummary)

    @property
    def month_label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "department_id": self.department_id,
            "month": self.month_label,
            "employee_count": self.employee_count,
            "salaries": [s.to_dict() for s in self.salaries],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class SystemSalaryTotal:
    total_employees: int = 0
    total_monthly_salary: Decimal = ZERO
    total_calculated_salary: Decimal = ZERO
    total_deduction: Decimal = ZERO
    overtime_surplus: Decimal = ZERO
    deduction_percentage: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            k: v if isinstance(v, int) else str(v) for k, v in self.__dict__.items()
        }


@dataclass(frozen=True)
class SystemSalaryReport:
    year: int
    month: int
    department_count: int
    departments: list[DepartmentSalaryReport] = field(default_factory=list)
    system_total: SystemSalaryTotal = field(default_factory=SystemSalaryTotal)

    @property
    def month_label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month_label,
            "department_count": self.department_count,
            "departments": [d.to_dict() for d in self.departments],
            "system_total": self.system_total.to_dict(),
        }
