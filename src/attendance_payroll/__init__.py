"""Attendance lifecycle and monthly payroll."""

__version__ = "0.1.0"
