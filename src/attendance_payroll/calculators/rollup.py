"""Department and system salary roll-ups.

Both reductions are exact Decimal sums, so they are independent of input
order. Salaries and departments are sorted by id in the output.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from attendance_payroll.calculators.types import (
    ZERO,
    DepartmentSalaryReport,
    DepartmentSalarySummary,
    SalaryCalculation,
    SystemSalaryReport,
    SystemSalaryTotal,
    percentage,
    quantize,
)


def roll_up_department(
    department_id: str,
    year: int,
    month: int,
    calculations: Iterable[SalaryCalculation],
) -> DepartmentSalaryReport:
    """Summarise the calculations of active employees in one department.

    total_deduction is floored at 0; when overtime pushes the calculated
    total above the monthly total, the excess is reported as
    overtime_surplus instead.
    """
    included = sorted(
        (c for c in calculations if c.employee_active),
        key=lambda c: c.employee_id,
    )

    total_monthly = sum((c.monthly_salary for c in included), ZERO)
    total_calculated = sum((c.calculated_salary for c in included), ZERO)
    total_base = sum((c.base_salary for c in included), ZERO)
    total_overtime = sum((c.overtime_pay for c in included), ZERO)
    difference = total_monthly - total_calculated

    average_days = ZERO
    if included:
        average_days = sum((c.days_present for c in included), ZERO) / Decimal(len(included))

    summary = DepartmentSalarySummary(
        total_monthly_salary=total_monthly,
        total_calculated_salary=total_calculated,
        total_base_salary=total_base,
        total_overtime_pay=total_overtime,
        total_deduction=max(difference, ZERO),
        overtime_surplus=max(-difference, ZERO),
        average_days_present=quantize(average_days),
    )

    return DepartmentSalaryReport(
        department_id=department_id,
        year=year,
        month=month,
        employee_count=len(included),
        salaries=included,
        summary=summary,
    )


def roll_up_system(
    year: int,
    month: int,
    department_reports: Iterable[DepartmentSalaryReport],
) -> SystemSalaryReport:
    """Sum department summaries into the system-wide total."""
    reports = sorted(department_reports, key=lambda r: r.department_id)

    total_monthly = sum((r.summary.total_monthly_salary for r in reports), ZERO)
    total_deduction = sum((r.summary.total_deduction for r in reports), ZERO)

    system_total = SystemSalaryTotal(
        total_employees=sum(r.employee_count for r in reports),
        total_monthly_salary=total_monthly,
        total_calculated_salary=sum(
            (r.summary.total_calculated_salary for r in reports), ZERO
        ),
        total_deduction=total_deduction,
        overtime_surplus=sum((r.summary.overtime_surplus for r in reports), ZERO),
        deduction_percentage=percentage(total_deduction, total_monthly),
    )

    return SystemSalaryReport(
        year=year,
        month=month,
        department_count=len(reports),
        departments=reports,
        system_total=system_total,
    )
