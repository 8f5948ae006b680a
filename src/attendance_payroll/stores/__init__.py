"""Attendance store and employee directory implementations."""

from attendance_payroll.stores.base import AttendanceStore, EmployeeDirectory
from attendance_payroll.stores.memory import InMemoryAttendanceStore, InMemoryEmployeeDirectory
from attendance_payroll.stores.sql import SqlAttendanceStore, SqlEmployeeDirectory

__all__ = [
    "AttendanceStore",
    "EmployeeDirectory",
    "InMemoryAttendanceStore",
    "InMemoryEmployeeDirectory",
    "SqlAttendanceStore",
    "SqlEmployeeDirectory",
]
