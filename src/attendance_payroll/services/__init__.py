"""Attendance and payroll services."""

from attendance_payroll.services.attendance_service import AttendanceService
from attendance_payroll.services.correction_policy import CorrectionPolicy, CorrectionRequest
from attendance_payroll.services.salary_service import SalaryService
from attendance_payroll.services.state_machine import AttendanceStateMachine

__all__ = [
    "AttendanceService",
    "AttendanceStateMachine",
    "CorrectionPolicy",
    "CorrectionRequest",
    "SalaryService",
]
