"""SQL store integration tests.

Run against a SQLite file through aiosqlite; the same code runs on
PostgreSQL through asyncpg.
"""

import asyncio
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from attendance_payroll.clock import FixedClock
from attendance_payroll.domain import AttendanceRecord, AttendanceStatus, AuditEntry
from attendance_payroll.errors import ConcurrentUpdateError, StoreUnavailableError
from attendance_payroll.services import AttendanceService, SalaryService
from attendance_payroll.stores import SqlAttendanceStore

from ..conftest import NOW, TODAY, at, days_ago, present

pytestmark = pytest.mark.asyncio

IST = timezone(timedelta(hours=5, minutes=30))


def audit_for(record: AttendanceRecord) -> AuditEntry:
    return AuditEntry(
        audit_id=uuid4(),
        record_id=record.record_id,
        employee_id=record.employee_id,
        work_date=record.work_date,
        actor_id="HR-1",
        recorded_at=NOW,
        reason="Manual adjustment approved",
        before=None,
        after=record.snapshot(),
    )


class TestAttendanceStore:
    async def test_round_trip(self, sql_store):
        record = present("E001", days_ago(1), overtime="1.25")

        stored = await sql_store.put(record)
        loaded = await sql_store.get("E001", days_ago(1))

        assert stored.version == 1
        assert loaded == stored
        assert loaded.entry_time.tzinfo is not None
        assert loaded.overtime_hours == Decimal("1.25")

    async def test_timestamps_normalised_to_utc(self, sql_store):
        day = days_ago(1)
        entry = datetime(day.year, day.month, day.day, 14, 30, tzinfo=IST)
        record = AttendanceRecord(
            employee_id="E001",
            work_date=day,
            status=AttendanceStatus.PENDING,
            entry_time=entry,
        )

        await sql_store.put(record)
        loaded = await sql_store.get("E001", day)

        assert loaded.entry_time == entry
        assert loaded.entry_time.utcoffset() == timedelta(0)

    async def test_missing_record(self, sql_store):
        assert await sql_store.get("E001", days_ago(1)) is None

    async def test_duplicate_insert_conflicts(self, sql_store):
        record = present("E001", days_ago(1))
        await sql_store.put(record)

        with pytest.raises(ConcurrentUpdateError):
            await sql_store.put(record)

    async def test_stale_update_conflicts(self, sql_store):
        stored = await sql_store.put(present("E001", days_ago(1)))

        updated = await sql_store.put(replace(stored, last_modified_by="HR-1"))
        assert updated.version == 2

        with pytest.raises(ConcurrentUpdateError):
            await sql_store.put(replace(stored, last_modified_by="HR-2"))

        loaded = await sql_store.get("E001", days_ago(1))
        assert loaded.last_modified_by == "HR-1"
        assert loaded.version == 2

    async def test_audit_written_with_record(self, sql_store):
        record = present("E001", days_ago(2))
        entry = audit_for(record)

        await sql_store.put(record, entry)

        history = await sql_store.list_audit_entries(record.record_id)
        assert history == [entry]

    async def test_audit_discarded_on_conflict(self, sql_store):
        record = present("E001", days_ago(2))
        await sql_store.put(record)

        with pytest.raises(ConcurrentUpdateError):
            await sql_store.put(record, audit_for(record))

        assert await sql_store.list_audit_entries(record.record_id) == []

    async def test_append_audit_entry(self, sql_store):
        record = present("E003", days_ago(3))
        await sql_store.append_audit_entry(audit_for(record))

        assert len(await sql_store.list_audit_entries(record.record_id)) == 1

    async def test_search(self, sql_store):
        await sql_store.put(present("E001", days_ago(3)))
        await sql_store.put(present("E002", days_ago(2)))
        await sql_store.put(
            AttendanceRecord(
                employee_id="E001",
                work_date=days_ago(1),
                status=AttendanceStatus.PENDING,
                entry_time=at(days_ago(1), 9),
            )
        )

        everything = await sql_store.search()
        assert [(r.employee_id, r.work_date) for r in everything] == [
            ("E001", days_ago(3)),
            ("E002", days_ago(2)),
            ("E001", days_ago(1)),
        ]

        pending = await sql_store.search(status=AttendanceStatus.PENDING)
        assert [r.work_date for r in pending] == [days_ago(1)]

        ranged = await sql_store.query("E001", days_ago(3), days_ago(2))
        assert len(ranged) == 1

        assert await sql_store.search(employee_ids=[]) == []


class TestStoreFailures:
    async def test_driver_error_is_unavailable(self, sql_store):
        async def broken(session):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            await sql_store._run("get", broken)

        assert exc_info.value.operation == "get"

    async def test_timeout_is_unavailable(self, session_factory):
        store = SqlAttendanceStore(session_factory, timeout_seconds=0.01)

        async def slow(session):
            await asyncio.sleep(1)

        with pytest.raises(StoreUnavailableError):
            await store._run("query", slow)


class TestEmployeeDirectory:
    async def test_get_employee(self, sql_directory):
        employee = await sql_directory.get_employee("E001")

        assert employee.name == "Alice Moreau"
        assert employee.monthly_salary == Decimal("31000.00")
        assert employee.overtime_eligible is True
        assert await sql_directory.get_employee("NOPE") is None

    async def test_list_employees(self, sql_directory):
        engineering = await sql_directory.list_employees(department_id="ENG")
        assert [e.id for e in engineering] == ["E001", "E002", "E004"]

        active = await sql_directory.list_employees(department_id="ENG", is_active=True)
        assert [e.id for e in active] == ["E001", "E002"]

    async def test_departments(self, sql_directory):
        assert (await sql_directory.get_department("OPS")).name == "Operations"
        active = await sql_directory.list_departments(is_active=True)
        assert [d.id for d in active] == ["ENG", "OPS"]
        assert len(await sql_directory.list_departments()) == 3


class TestServicesOnSql:
    async def test_attendance_lifecycle(self, sql_store, sql_directory):
        service = AttendanceService(sql_store, sql_directory, FixedClock(NOW))

        await service.mark_entry("E002", at(TODAY, 9))
        record = await service.mark_exit("E002", at(TODAY, 18, 15))
        assert record.status == AttendanceStatus.PRESENT
        assert record.overtime_hours == Decimal("1.25")

        day = days_ago(1)
        corrected = await service.correct(
            f"E002:{day.isoformat()}",
            AttendanceStatus.HALF_DAY,
            "Doctor appointment in the afternoon",
            actor_id="HR-1",
            new_entry=at(day, 9),
            new_exit=at(day, 13),
        )
        assert corrected.version == 1

        history = await service.get_history(corrected.record_id)
        assert len(history) == 1
        assert history[0].after["status"] == "half_day"

    async def test_department_report(self, sql_store, sql_directory):
        for d in range(1, 31):
            await sql_store.put(present("E002", date(2026, 9, d)))
        service = SalaryService(sql_store, sql_directory, FixedClock(NOW))

        report = await service.get_department_report("ENG", 2026, 9)

        assert report.employee_count == 2
        assert report.summary.total_calculated_salary == Decimal("24800.00")
        assert report.summary.total_deduction == Decimal("31000.00")
