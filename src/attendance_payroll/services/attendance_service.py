"""Attendance service - punches, corrections and record queries."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Awaitable, Callable

from attendance_payroll.clock import Clock
from attendance_payroll.domain import (
    AttendanceRecord,
    AttendanceStatus,
    AuditEntry,
    Employee,
    parse_record_id,
)
from attendance_payroll.errors import (
    ConcurrentUpdateError,
    EmployeeNotFoundError,
    InactiveEmployeeError,
    InvalidRequestError,
    PunchDateMismatchError,
)
from attendance_payroll.services.correction_policy import CorrectionPolicy, CorrectionRequest
from attendance_payroll.services.state_machine import AttendanceStateMachine
from attendance_payroll.stores.base import AttendanceStore, EmployeeDirectory

logger = logging.getLogger(__name__)

# (record to return, audit entry, whether the record must be written)
_WritePlan = tuple[AttendanceRecord, AuditEntry | None, bool]


class AttendanceService:
    """Service for the attendance record lifecycle.

    Operations:
    - mark_entry: open today's record (pending)
    - mark_exit: close today's record (present)
    - correct: overwrite a past record within the correction window
    - get_record / list_records / correctable_records / get_history: reads

    Every write validates exhaustively before touching the store. Lost
    optimistic-version races are retried by re-reading and re-validating,
    so a replayed punch fails its precondition instead of double-writing.
    Store timeouts are never retried here.
    """

    def __init__(
        self,
        store: AttendanceStore,
        directory: EmployeeDirectory,
        clock: Clock,
        policy: CorrectionPolicy | None = None,
        write_retries: int = 3,
    ):
        self.store = store
        self.directory = directory
        self.clock = clock
        self.policy = policy or CorrectionPolicy()
        self.write_retries = write_retries

    async def mark_entry(
        self,
        employee_id: str,
        timestamp: datetime | None = None,
        actor_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> AttendanceRecord:
        """Record the entry punch for today."""
        await self._require_active(employee_id)
        work_date = self.clock.today()
        punch_time = self._punch_time(employee_id, work_date, timestamp)

        async def plan() -> _WritePlan:
            current = await self.store.get(employee_id, work_date)
            replayed = _replayed(current, "entry", idempotency_key)
            if replayed is not None:
                return replayed, None, False
            record = AttendanceStateMachine.apply_entry(
                current,
                employee_id,
                work_date,
                punch_time,
                actor_id,
                _scoped_key("entry", idempotency_key),
            )
            return record, None, True

        record = await self._write("mark_entry", plan)
        logger.info("Entry marked for %s on %s", employee_id, work_date)
        return record

    async def mark_exit(
        self,
        employee_id: str,
        timestamp: datetime | None = None,
        actor_id: str | None = None,
        idempotency_key: str | None = None,
    ) -> AttendanceRecord:
        """Record the exit punch for today."""
        await self._require_active(employee_id)
        work_date = self.clock.today()
        punch_time = self._punch_time(employee_id, work_date, timestamp)

        async def plan() -> _WritePlan:
            current = await self.store.get(employee_id, work_date)
            replayed = _replayed(current, "exit", idempotency_key)
            if replayed is not None:
                return replayed, None, False
            record = AttendanceStateMachine.apply_exit(
                current,
                employee_id,
                work_date,
                punch_time,
                self.policy.payroll.standard_daily_hours,
                actor_id,
                _scoped_key("exit", idempotency_key),
            )
            return record, None, True

        record = await self._write("mark_exit", plan)
        logger.info("Exit marked for %s on %s", employee_id, work_date)
        return record

    async def correct(
        self,
        record_id: str,
        new_status: AttendanceStatus,
        reason: str,
        actor_id: str,
        new_entry: datetime | None = None,
        new_exit: datetime | None = None,
        overtime_hours: Decimal | None = None,
        idempotency_key: str | None = None,
    ) -> AttendanceRecord:
        """Correct a past record and append an audit entry atomically."""
        self.policy.validate_reason(reason)
        employee_id, work_date = parse_record_id(record_id)

        try:
            status = AttendanceStatus(new_status)
        except ValueError:
            raise InvalidRequestError(
                "status", f"unknown attendance status {new_status!r}"
            ) from None

        request = CorrectionRequest(
            status=status,
            reason=reason,
            entry_time=new_entry,
            exit_time=new_exit,
            overtime_hours=overtime_hours,
        )
        self.policy.validate(work_date, request, self.clock.today(), self.clock.tz)
        await self._require_active(employee_id)

        async def plan() -> _WritePlan:
            current = await self.store.get(employee_id, work_date)
            replayed = _replayed(current, "correct", idempotency_key)
            if replayed is not None:
                return replayed, None, False
            base = current or AttendanceRecord.inferred_absent(employee_id, work_date)
            corrected, entry = self.policy.apply(
                base,
                request,
                actor_id,
                self.clock.now(),
                _scoped_key("correct", idempotency_key),
            )
            return corrected, entry, True

        record = await self._write("correct", plan)
        logger.info(
            "Record %s corrected to %s by %s", record_id, request.status.value, actor_id
        )
        return record

    async def get_record(self, employee_id: str, work_date: date) -> AttendanceRecord | None:
        """Stored record, an inferred absence for a past day, or None."""
        record = await self.store.get(employee_id, work_date)
        if record is not None:
            return record
        if work_date < self.clock.today():
            return AttendanceRecord.inferred_absent(employee_id, work_date)
        return None

    async def list_records(
        self,
        employee_id: str | None = None,
        department_id: str | None = None,
        work_date: date | None = None,
        status: AttendanceStatus | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AttendanceRecord]:
        """Stored records matching all filters."""
        employee_ids: list[str] | None = None
        if employee_id is not None:
            employee_ids = [employee_id]
        if department_id is not None:
            members = await self.directory.list_employees(department_id=department_id)
            member_ids = [e.id for e in members]
            employee_ids = (
                member_ids
                if employee_ids is None
                else [e for e in employee_ids if e in member_ids]
            )
        if work_date is not None:
            start = end = work_date

        return await self.store.search(
            employee_ids=employee_ids, start=start, end=end, status=status
        )

    async def correctable_records(self, employee_id: str) -> list[AttendanceRecord]:
        """Every day of the current correction window, newest first."""
        if await self.directory.get_employee(employee_id) is None:
            raise EmployeeNotFoundError(employee_id)

        earliest, latest = self.policy.window(self.clock.today())
        stored = {
            r.work_date: r for r in await self.store.query(employee_id, earliest, latest)
        }
        days = (latest - earliest).days
        return [
            stored.get(d) or AttendanceRecord.inferred_absent(employee_id, d)
            for d in (latest - timedelta(days=i) for i in range(days + 1))
        ]

    async def get_history(self, record_id: str) -> list[AuditEntry]:
        """Correction history of a record, oldest first."""
        parse_record_id(record_id)
        return await self.store.list_audit_entries(record_id)

    def _punch_time(
        self,
        employee_id: str,
        work_date: date,
        timestamp: datetime | None,
    ) -> datetime:
        """The punch instant; a supplied timestamp must fall on the work date."""
        if timestamp is None:
            return self.clock.now()
        if timestamp.tzinfo is None:
            raise InvalidRequestError("timestamp", "punch timestamps must be timezone-aware")
        punch_date = self.clock.local_date(timestamp)
        if punch_date != work_date:
            raise PunchDateMismatchError(employee_id, work_date, punch_date)
        return timestamp

    async def _require_active(self, employee_id: str) -> Employee:
        employee = await self.directory.get_employee(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        if not employee.is_active:
            raise InactiveEmployeeError(employee_id)
        return employee

    async def _write(
        self,
        operation: str,
        plan: Callable[[], Awaitable[_WritePlan]],
    ) -> AttendanceRecord:
        """Read-validate-write with bounded retry on version conflicts."""
        attempt = 0
        while True:
            record, audit_entry, changed = await plan()
            if not changed:
                logger.info("Replayed %s for %s", operation, record.record_id)
                return record
            try:
                return await self.store.put(record, audit_entry)
            except ConcurrentUpdateError:
                attempt += 1
                if attempt > self.write_retries:
                    raise
                logger.info(
                    "Version conflict on %s for %s, retrying (%d/%d)",
                    operation,
                    record.record_id,
                    attempt,
                    self.write_retries,
                )


def _scoped_key(operation: str, key: str | None) -> str | None:
    # Keys are stored per operation so an entry key never replays an exit
    return f"{operation}:{key}" if key is not None else None


def _replayed(
    current: AttendanceRecord | None, operation: str, key: str | None
) -> AttendanceRecord | None:
    """The stored record if it already carries this request's key."""
    if current is None or key is None:
        return None
    if current.last_request_key != _scoped_key(operation, key):
        return None
    return current
