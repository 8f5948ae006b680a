"""HTTP API for attendance and payroll."""
