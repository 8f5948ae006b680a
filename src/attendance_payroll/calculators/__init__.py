"""Attendance aggregation and payroll calculation."""

from attendance_payroll.calculators.aggregator import MonthlyAggregator, month_bounds, tally
from attendance_payroll.calculators.payroll_calculator import PayrollCalculator
from attendance_payroll.calculators.rollup import roll_up_department, roll_up_system
from attendance_payroll.calculators.types import (
    DepartmentSalaryReport,
    DepartmentSalarySummary,
    MonthlyAggregate,
    SalaryCalculation,
    SystemSalaryReport,
    SystemSalaryTotal,
)

__all__ = [
    "DepartmentSalaryReport",
    "DepartmentSalarySummary",
    "MonthlyAggregate",
    "MonthlyAggregator",
    "PayrollCalculator",
    "SalaryCalculation",
    "SystemSalaryReport",
    "SystemSalaryTotal",
    "month_bounds",
    "roll_up_department",
    "roll_up_system",
    "tally",
]
