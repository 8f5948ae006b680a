"""Attendance record state machine with transition validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from attendance_payroll.domain import AttendanceRecord, AttendanceStatus
from attendance_payroll.errors import (
    AlreadyMarkedError,
    InvalidRequestError,
    InvalidTimeOrderError,
    NoEntryRecordedError,
)

HOURS_QUANTUM = Decimal("0.01")
SECONDS_PER_HOUR = Decimal("3600")


class PunchKind:
    ENTRY = "entry"
    EXIT = "exit"


def overtime_from_times(
    entry_time: datetime,
    exit_time: datetime,
    standard_daily_hours: Decimal,
) -> Decimal:
    """Hours worked beyond the standard day, rounded to 0.01."""
    worked = Decimal(str((exit_time - entry_time).total_seconds())) / SECONDS_PER_HOUR
    overtime = max(Decimal("0"), worked - standard_daily_hours)
    return overtime.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


class AttendanceStateMachine:
    """State machine for one (employee, date) attendance record.

    Punch transitions (None = no stored record):
    - None → pending (entry)
    - absent → pending (entry, record has no entry time)
    - pending → present (exit)

    Corrections may move any state, including None, to any of
    present / absent / pending / half_day, subject to the correction policy.
    """

    PUNCH_TRANSITIONS: dict[str, dict[AttendanceStatus | None, list[AttendanceStatus]]] = {
        PunchKind.ENTRY: {
            None: [AttendanceStatus.PENDING],
            AttendanceStatus.ABSENT: [AttendanceStatus.PENDING],
        },
        PunchKind.EXIT: {
            AttendanceStatus.PENDING: [AttendanceStatus.PRESENT],
        },
    }

    CORRECTION_TARGETS = frozenset(AttendanceStatus)

    @classmethod
    def can_transition(
        cls,
        kind: str,
        from_status: AttendanceStatus | None,
        to_status: AttendanceStatus,
    ) -> bool:
        """Check if a punch transition is valid."""
        allowed = cls.PUNCH_TRANSITIONS.get(kind, {}).get(from_status, [])
        return to_status in allowed

    @classmethod
    def can_correct_to(cls, to_status: AttendanceStatus) -> bool:
        return to_status in cls.CORRECTION_TARGETS

    @classmethod
    def apply_entry(
        cls,
        current: AttendanceRecord | None,
        employee_id: str,
        work_date: date,
        timestamp: datetime,
        actor_id: str | None = None,
        request_key: str | None = None,
    ) -> AttendanceRecord:
        """Return the record after an entry punch.

        Raises AlreadyMarkedError if the day already has an entry time.
        """
        if timestamp.tzinfo is None:
            raise InvalidRequestError("timestamp", "punch timestamps must be timezone-aware")

        from_status = current.status if current is not None else None
        if (current is not None and current.entry_time is not None) or not cls.can_transition(
            PunchKind.ENTRY, from_status, AttendanceStatus.PENDING
        ):
            raise AlreadyMarkedError(employee_id, work_date)

        if current is None:
            return AttendanceRecord(
                employee_id=employee_id,
                work_date=work_date,
                status=AttendanceStatus.PENDING,
                entry_time=timestamp,
                last_modified_by=actor_id or employee_id,
                last_request_key=request_key,
            )
        return replace(
            current,
            status=AttendanceStatus.PENDING,
            entry_time=timestamp,
            exit_time=None,
            last_modified_by=actor_id or employee_id,
            last_request_key=request_key,
        )

    @classmethod
    def apply_exit(
        cls,
        current: AttendanceRecord | None,
        employee_id: str,
        work_date: date,
        timestamp: datetime,
        standard_daily_hours: Decimal,
        actor_id: str | None = None,
        request_key: str | None = None,
    ) -> AttendanceRecord:
        """Return the record after an exit punch.

        Raises NoEntryRecordedError without a pending record and
        InvalidTimeOrderError if the exit precedes the entry.
        """
        if timestamp.tzinfo is None:
            raise InvalidRequestError("timestamp", "punch timestamps must be timezone-aware")

        if (
            current is None
            or current.entry_time is None
            or not cls.can_transition(PunchKind.EXIT, current.status, AttendanceStatus.PRESENT)
        ):
            raise NoEntryRecordedError(employee_id, work_date)

        if timestamp < current.entry_time:
            raise InvalidTimeOrderError(current.entry_time, timestamp)

        return replace(
            current,
            status=AttendanceStatus.PRESENT,
            exit_time=timestamp,
            overtime_hours=overtime_from_times(
                current.entry_time, timestamp, standard_daily_hours
            ),
            last_modified_by=actor_id or employee_id,
            last_request_key=request_key,
        )
