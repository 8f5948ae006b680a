"""Error kinds raised across the attendance payroll boundary.

Every error carries a stable ``code`` that the API layer maps to a status
and that callers can switch on.
"""

from __future__ import annotations

from datetime import date, datetime


class AttendancePayrollError(Exception):
    """Base class for all structured errors."""

    code = "ATTENDANCE_PAYROLL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# State machine misuse


class AlreadyMarkedError(AttendancePayrollError):
    """Raised when an entry punch already exists for the day."""

    code = "ALREADY_MARKED"

    def __init__(self, employee_id: str, work_date: date):
        self.employee_id = employee_id
        self.work_date = work_date
        super().__init__(
            f"Entry already marked for employee {employee_id} on {work_date.isoformat()}"
        )


class NoEntryRecordedError(AttendancePayrollError):
    """Raised when an exit punch has no pending entry to close."""

    code = "NO_ENTRY_RECORDED"

    def __init__(self, employee_id: str, work_date: date):
        self.employee_id = employee_id
        self.work_date = work_date
        super().__init__(
            f"No pending entry for employee {employee_id} on {work_date.isoformat()}"
        )


class InvalidTimeOrderError(AttendancePayrollError):
    """Raised when an exit punch precedes the entry punch."""

    code = "INVALID_TIME_ORDER"

    def __init__(self, entry_time: datetime, exit_time: datetime):
        self.entry_time = entry_time
        self.exit_time = exit_time
        super().__init__(
            f"Exit time {exit_time.isoformat()} is earlier than entry time "
            f"{entry_time.isoformat()}"
        )


class PunchDateMismatchError(AttendancePayrollError):
    """Raised when a punch timestamp falls on another day than the work date."""

    code = "PUNCH_DATE_MISMATCH"

    def __init__(self, employee_id: str, work_date: date, punch_date: date):
        self.employee_id = employee_id
        self.work_date = work_date
        self.punch_date = punch_date
        super().__init__(
            f"Punch for employee {employee_id} is dated {punch_date.isoformat()}, "
            f"not the work date {work_date.isoformat()}"
        )


# Correction policy


class ReasonTooShortError(AttendancePayrollError):
    """Raised when a correction reason is too short after trimming."""

    code = "REASON_TOO_SHORT"

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Correction reason must be at least {minimum} characters (got {length})"
        )


class OutsideCorrectionWindowError(AttendancePayrollError):
    """Raised when the target date cannot be corrected any more (or yet)."""

    code = "OUTSIDE_CORRECTION_WINDOW"

    def __init__(self, work_date: date, earliest: date, latest: date):
        self.work_date = work_date
        self.earliest = earliest
        self.latest = latest
        super().__init__(
            f"Date {work_date.isoformat()} is outside the correction window "
            f"[{earliest.isoformat()}, {latest.isoformat()}]"
        )


class IncompleteTimesError(AttendancePayrollError):
    """Raised when correction times do not fit the requested status."""

    code = "INCOMPLETE_TIMES"

    def __init__(self, status: str, detail: str):
        self.status = status
        self.detail = detail
        super().__init__(f"Cannot correct to '{status}': {detail}")


# Master data


class EmployeeNotFoundError(AttendancePayrollError):
    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


class DepartmentNotFoundError(AttendancePayrollError):
    code = "DEPARTMENT_NOT_FOUND"

    def __init__(self, department_id: str):
        self.department_id = department_id
        super().__init__(f"Department {department_id} not found")


class InactiveEmployeeError(AttendancePayrollError):
    """Raised for write operations (and strict payroll) on inactive employees."""

    code = "INACTIVE_EMPLOYEE"

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} is inactive")


class MalformedEmployeeError(AttendancePayrollError):
    """Raised when employee master data breaks its invariants."""

    code = "MALFORMED_EMPLOYEE"

    def __init__(self, employee_id: str, reason: str):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Employee {employee_id} has malformed master data: {reason}")


class InvalidRecordIdError(AttendancePayrollError):
    code = "INVALID_RECORD_ID"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Invalid attendance record id '{record_id}'")


class InvalidRequestError(AttendancePayrollError):
    """Raised when an operation argument is malformed.

    Naive timestamps, months outside 1..12, unknown statuses or sort keys.
    """

    code = "INVALID_REQUEST"

    def __init__(self, field: str, detail: str):
        self.field = field
        self.detail = detail
        super().__init__(f"Invalid {field}: {detail}")


# Infrastructure


class StoreUnavailableError(AttendancePayrollError):
    """Transient store failure (timeout, lost connection).

    Reads may be retried by the caller. Writes must not be retried blindly.
    """

    code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, reason: str | None = None):
        self.operation = operation
        self.reason = reason
        msg = f"Attendance store unavailable during '{operation}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ConcurrentUpdateError(AttendancePayrollError):
    """Raised when a write loses an optimistic version race."""

    code = "CONCURRENT_UPDATE"

    def __init__(self, record_id: str, expected_version: int):
        self.record_id = record_id
        self.expected_version = expected_version
        super().__init__(
            f"Record {record_id} changed concurrently (expected version {expected_version})"
        )


class DeadlineExceededError(AttendancePayrollError):
    code = "DEADLINE_EXCEEDED"

    def __init__(self, operation: str, seconds: float):
        self.operation = operation
        self.seconds = seconds
        super().__init__(f"'{operation}' did not finish within {seconds}s")
