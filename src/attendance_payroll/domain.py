"""Domain types for attendance records and employee master data.

All types are immutable. State changes produce new records via
dataclasses.replace so that replaying the same calls from the same
initial state yields identical records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from attendance_payroll.errors import InvalidRecordIdError

RECORD_ID_SEPARATOR = ":"


class AttendanceStatus(str, Enum):
    """Attendance status values."""

    ABSENT = "absent"
    PENDING = "pending"
    PRESENT = "present"
    HALF_DAY = "half_day"


def make_record_id(employee_id: str, work_date: date) -> str:
    """Build the deterministic id of the (employee, date) record."""
    return f"{employee_id}{RECORD_ID_SEPARATOR}{work_date.isoformat()}"


def parse_record_id(record_id: str) -> tuple[str, date]:
    """Split a record id back into (employee_id, work_date)."""
    employee_id, sep, date_part = record_id.rpartition(RECORD_ID_SEPARATOR)
    if not sep or not employee_id:
        raise InvalidRecordIdError(record_id)
    try:
        return employee_id, date.fromisoformat(date_part)
    except ValueError:
        raise InvalidRecordIdError(record_id)


@dataclass(frozen=True)
class Department:
    """Department master data (read-only)."""

    id: str
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class Employee:
    """Employee master data (read-only)."""

    id: str
    employee_code: str
    name: str
    department_id: str | None
    monthly_salary: Decimal
    overtime_eligible: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee's attendance for one calendar date.

    ``version`` is 0 for a record that has never been stored (an inferred
    absence or a record about to be inserted) and is incremented by the
    store on every write.
    """

    employee_id: str
    work_date: date
    status: AttendanceStatus
    entry_time: datetime | None = None
    exit_time: datetime | None = None
    is_corrected: bool = False
    correction_reason: str | None = None
    last_modified_by: str | None = None
    overtime_hours: Decimal | None = None
    version: int = 0
    last_request_key: str | None = None

    def __post_init__(self) -> None:
        for name in ("entry_time", "exit_time"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                raise ValueError(f"{name} must be timezone-aware")
        if self.entry_time and self.exit_time and self.exit_time < self.entry_time:
            raise ValueError("exit_time must not be earlier than entry_time")
        if self.is_corrected != (self.correction_reason is not None):
            raise ValueError("is_corrected must be set iff correction_reason is set")
        if self.overtime_hours is not None and self.overtime_hours < 0:
            raise ValueError("overtime_hours cannot be negative")

        has_entry = self.entry_time is not None
        has_exit = self.exit_time is not None
        if self.status == AttendanceStatus.PRESENT and not (has_entry and has_exit):
            raise ValueError("present requires entry_time and exit_time")
        if self.status == AttendanceStatus.PENDING and not (has_entry and not has_exit):
            raise ValueError("pending requires entry_time without exit_time")
        if self.status == AttendanceStatus.ABSENT and (has_entry or has_exit):
            raise ValueError("absent cannot carry entry_time or exit_time")
        if self.status == AttendanceStatus.HALF_DAY and not self.is_corrected:
            raise ValueError("half_day can only be assigned by a correction")

    @classmethod
    def inferred_absent(cls, employee_id: str, work_date: date) -> AttendanceRecord:
        """Synthesize the absent record of a past day with no stored record."""
        return cls(
            employee_id=employee_id,
            work_date=work_date,
            status=AttendanceStatus.ABSENT,
        )

    @property
    def record_id(self) -> str:
        return make_record_id(self.employee_id, self.work_date)

    @property
    def is_stored(self) -> bool:
        return self.version > 0

    @property
    def work_duration_minutes(self) -> int | None:
        """Minutes between entry and exit, if both are set."""
        if self.entry_time is None or self.exit_time is None:
            return None
        return int((self.exit_time - self.entry_time).total_seconds() // 60)

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-safe snapshot for the audit trail."""
        return {
            "status": self.status.value,
            "entry_time": self.entry_time.isoformat() if self.entry_time else None,
            "exit_time": self.exit_time.isoformat() if self.exit_time else None,
            "is_corrected": self.is_corrected,
            "correction_reason": self.correction_reason,
            "last_modified_by": self.last_modified_by,
            "overtime_hours": (
                str(self.overtime_hours) if self.overtime_hours is not None else None
            ),
            "version": self.version,
        }


@dataclass(frozen=True)
class AuditEntry:
    """One correction event in the append-only history of a record."""

    audit_id: UUID
    record_id: str
    employee_id: str
    work_date: date
    actor_id: str
    recorded_at: datetime
    reason: str
    before: dict[str, Any] | None
    after: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "audit_id": str(self.audit_id),
            "record_id": self.record_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "actor_id": self.actor_id,
            "recorded_at": self.recorded_at.isoformat(),
            "reason": self.reason,
            "before": self.before,
            "after": self.after,
        }
