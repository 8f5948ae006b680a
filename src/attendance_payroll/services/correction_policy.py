"""Correction policy: window, reason and time rules, audit entries."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from uuid import uuid4

from attendance_payroll.config import CorrectionPolicyConfig, PayrollPolicy
from attendance_payroll.domain import AttendanceRecord, AttendanceStatus, AuditEntry
from attendance_payroll.errors import (
    IncompleteTimesError,
    OutsideCorrectionWindowError,
    ReasonTooShortError,
)
from attendance_payroll.services.state_machine import (
    AttendanceStateMachine,
    overtime_from_times,
)

OVERTIME_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY})


@dataclass(frozen=True)
class CorrectionRequest:
    """Requested overwrite of one attendance record."""

    status: AttendanceStatus
    reason: str
    entry_time: datetime | None = None
    exit_time: datetime | None = None
    overtime_hours: Decimal | None = None


class CorrectionPolicy:
    """Validates corrections and produces the corrected record and audit entry.

    Validation order is fixed so that a short reason is always reported
    first, whatever else is wrong with the request:
    1) reason length
    2) correction window
    3) times and overtime consistent with the target status
    """

    def __init__(
        self,
        config: CorrectionPolicyConfig | None = None,
        payroll: PayrollPolicy | None = None,
    ) -> None:
        self.config = config or CorrectionPolicyConfig()
        self.payroll = payroll or PayrollPolicy()

    def window(self, today: date) -> tuple[date, date]:
        """Inclusive [earliest, latest] correctable dates."""
        return today - timedelta(days=self.config.window_days), today - timedelta(days=1)

    def in_window(self, work_date: date, today: date) -> bool:
        earliest, latest = self.window(today)
        return earliest <= work_date <= latest

    def validate_reason(self, reason: str | None) -> str:
        """Return the trimmed reason or raise ReasonTooShortError."""
        trimmed = reason.strip() if reason else ""
        if len(trimmed) < self.config.min_reason_length:
            raise ReasonTooShortError(len(trimmed), self.config.min_reason_length)
        return trimmed

    def validate(
        self,
        work_date: date,
        request: CorrectionRequest,
        today: date,
        tz: tzinfo = timezone.utc,
    ) -> None:
        """Raise the first policy violation of the request, if any.

        Corrected times must fall on ``work_date`` in the business timezone ``tz``.
        """
        self.validate_reason(request.reason)

        if not self.in_window(work_date, today):
            earliest, latest = self.window(today)
            raise OutsideCorrectionWindowError(work_date, earliest, latest)

        self._validate_times(request, work_date, tz)

    def _validate_times(self, request: CorrectionRequest, work_date: date, tz: tzinfo) -> None:
        status = request.status
        entry, exit_ = request.entry_time, request.exit_time

        if not AttendanceStateMachine.can_correct_to(status):
            raise IncompleteTimesError(str(status), "unknown target status")

        for value in (entry, exit_):
            if value is not None and value.tzinfo is None:
                raise IncompleteTimesError(status.value, "times must include a timezone")
            if value is not None and value.astimezone(tz).date() != work_date:
                raise IncompleteTimesError(
                    status.value, f"times must fall on {work_date.isoformat()}"
                )

        if status == AttendanceStatus.PRESENT:
            if entry is None or exit_ is None:
                raise IncompleteTimesError(status.value, "entry and exit times are required")
        elif status == AttendanceStatus.PENDING:
            if entry is None:
                raise IncompleteTimesError(status.value, "entry time is required")
            if exit_ is not None:
                raise IncompleteTimesError(status.value, "exit time must be empty")
        elif status == AttendanceStatus.ABSENT:
            if entry is not None or exit_ is not None:
                raise IncompleteTimesError(status.value, "entry and exit times must be empty")
        elif status == AttendanceStatus.HALF_DAY:
            if exit_ is not None and entry is None:
                raise IncompleteTimesError(status.value, "exit time requires an entry time")

        if entry is not None and exit_ is not None and exit_ < entry:
            raise IncompleteTimesError(status.value, "exit time is earlier than entry time")

        if request.overtime_hours is not None:
            if request.overtime_hours < 0:
                raise IncompleteTimesError(status.value, "overtime hours cannot be negative")
            if status not in OVERTIME_STATUSES:
                raise IncompleteTimesError(
                    status.value, "overtime hours only apply to present or half_day"
                )

    def apply(
        self,
        current: AttendanceRecord,
        request: CorrectionRequest,
        actor_id: str,
        now: datetime,
        request_key: str | None = None,
    ) -> tuple[AttendanceRecord, AuditEntry]:
        """Build the corrected record and its audit entry.

        ``current`` is the stored record or a synthesized absence (version 0).
        Call validate() first; apply() does not re-check the policy.
        """
        reason = request.reason.strip()

        overtime = request.overtime_hours
        if (
            overtime is None
            and request.status in OVERTIME_STATUSES
            and request.entry_time is not None
            and request.exit_time is not None
        ):
            overtime = overtime_from_times(
                request.entry_time, request.exit_time, self.payroll.standard_daily_hours
            )

        corrected = replace(
            current,
            status=request.status,
            entry_time=request.entry_time,
            exit_time=request.exit_time,
            overtime_hours=overtime,
            is_corrected=True,
            correction_reason=reason,
            last_modified_by=actor_id,
            last_request_key=request_key,
        )

        entry = AuditEntry(
            audit_id=uuid4(),
            record_id=current.record_id,
            employee_id=current.employee_id,
            work_date=current.work_date,
            actor_id=actor_id,
            recorded_at=now,
            reason=reason,
            before=current.snapshot() if current.is_stored else None,
            after=replace(corrected, version=current.version + 1).snapshot(),
        )
        return corrected, entry
