"""Monthly salary calculation from attendance aggregates."""

from __future__ import annotations

from decimal import Decimal

from attendance_payroll.calculators.types import (
    WARNING_INACTIVE_EMPLOYEE,
    ZERO,
    MonthlyAggregate,
    SalaryCalculation,
    quantize,
)
from attendance_payroll.config import PayrollPolicy
from attendance_payroll.domain import Employee
from attendance_payroll.errors import InactiveEmployeeError, MalformedEmployeeError


class PayrollCalculator:
    """Prorated salary plus overtime for one employee-month.

    Calculation (stable order):
    1) per_diem = monthly_salary / days_in_month (calendar days)
    2) base_salary = per_diem × days_present (half days allowed)
    3) overtime_pay = overtime_hours × per_diem / standard_daily_hours
       × overtime_multiplier, only for overtime-eligible employees
    4) each amount rounded half-up to the currency quantum;
       calculated_salary = base_salary + overtime_pay

    The calculator is a pure function of its inputs: the same employee and
    aggregate always produce an identical SalaryCalculation.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or PayrollPolicy()

    def calculate(
        self,
        employee: Employee,
        aggregate: MonthlyAggregate,
        strict: bool = True,
    ) -> SalaryCalculation:
        """Calculate salary.

        Args:
            employee: Employee master data
            aggregate: Attendance tallies for the month
            strict: If True, inactive employees raise InactiveEmployeeError.
                If False (audit mode), the calculation is returned with an
                INACTIVE_EMPLOYEE warning.

        Raises:
            InactiveEmployeeError: strict mode and employee is inactive
            MalformedEmployeeError: salary breaks the master data invariant
        """
        warnings: list[str] = []
        if not employee.is_active:
            if strict:
                raise InactiveEmployeeError(employee.id)
            warnings.append(WARNING_INACTIVE_EMPLOYEE)

        self._validate(employee, aggregate)

        quantum = self.policy.currency_quantum
        monthly = employee.monthly_salary
        per_diem = monthly / Decimal(aggregate.days_in_month)

        base_salary = quantize(per_diem * aggregate.days_present, quantum)

        overtime_hours = aggregate.total_overtime_hours
        if self.policy.overtime_cap_hours is not None:
            overtime_hours = min(overtime_hours, self.policy.overtime_cap_hours)

        overtime_pay = quantize(ZERO, quantum)
        if employee.overtime_eligible and overtime_hours > 0:
            rate = self.hourly_overtime_rate(monthly, aggregate.days_in_month)
            overtime_pay = quantize(overtime_hours * rate, quantum)

        return SalaryCalculation(
            employee_id=employee.id,
            employee_code=employee.employee_code,
            employee_name=employee.name,
            department_id=employee.department_id,
            year=aggregate.year,
            month=aggregate.month,
            days_in_month=aggregate.days_in_month,
            days_present=aggregate.days_present,
            days_absent=aggregate.days_absent,
            days_pending=aggregate.days_pending,
            monthly_salary=quantize(monthly, quantum),
            daily_rate=quantize(per_diem, quantum),
            base_salary=base_salary,
            overtime_hours=overtime_hours,
            overtime_pay=overtime_pay,
            calculated_salary=base_salary + overtime_pay,
            employee_active=employee.is_active,
            warnings=tuple(warnings),
        )

    def hourly_overtime_rate(self, monthly_salary: Decimal, days_in_month: int) -> Decimal:
        """Unrounded overtime rate per hour."""
        return (
            monthly_salary
            / Decimal(days_in_month)
            / self.policy.standard_daily_hours
            * self.policy.overtime_multiplier
        )

    def _validate(self, employee: Employee, aggregate: MonthlyAggregate) -> None:
        if aggregate.employee_id != employee.id:
            raise ValueError(
                f"Aggregate for {aggregate.employee_id} does not belong to {employee.id}"
            )
        if employee.monthly_salary < 0:
            raise MalformedEmployeeError(employee.id, "monthly salary is negative")
        if employee.is_active and employee.monthly_salary == 0:
            raise MalformedEmployeeError(employee.id, "active employee has no monthly salary")
        if aggregate.days_present > aggregate.days_in_month:
            raise ValueError("days_present cannot exceed days_in_month")
