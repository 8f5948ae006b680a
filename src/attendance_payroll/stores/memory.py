"""In-memory implementations of the store contracts.

Used for embedding the core without a database and for property tests.
Writes are serialized by a single asyncio lock, which trivially gives
at-most-one in-flight write per key.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date

from attendance_payroll.domain import (
    AttendanceRecord,
    AttendanceStatus,
    AuditEntry,
    Department,
    Employee,
)
from attendance_payroll.errors import ConcurrentUpdateError


class InMemoryAttendanceStore:
    """Dict-backed attendance store."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, date], AttendanceRecord] = {}
        self._audit: list[AuditEntry] = []
        self._lock = asyncio.Lock()

    async def get(self, employee_id: str, work_date: date) -> AttendanceRecord | None:
        return self._records.get((employee_id, work_date))

    async def put(
        self,
        record: AttendanceRecord,
        audit_entry: AuditEntry | None = None,
    ) -> AttendanceRecord:
        async with self._lock:
            key = (record.employee_id, record.work_date)
            current = self._records.get(key)
            current_version = current.version if current is not None else 0
            if current_version != record.version:
                raise ConcurrentUpdateError(record.record_id, record.version)

            stored = replace(record, version=record.version + 1)
            self._records[key] = stored
            if audit_entry is not None:
                self._audit.append(audit_entry)
            return stored

    async def query(
        self,
        employee_id: str,
        start: date,
        end: date,
    ) -> list[AttendanceRecord]:
        return await self.search(employee_ids=[employee_id], start=start, end=end)

    async def search(
        self,
        *,
        employee_ids: list[str] | None = None,
        start: date | None = None,
        end: date | None = None,
        status: AttendanceStatus | None = None,
    ) -> list[AttendanceRecord]:
        matches = [
            r
            for r in self._records.values()
            if (employee_ids is None or r.employee_id in employee_ids)
            and (start is None or r.work_date >= start)
            and (end is None or r.work_date <= end)
            and (status is None or r.status == status)
        ]
        return sorted(matches, key=lambda r: (r.work_date, r.employee_id))

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        async with self._lock:
            self._audit.append(entry)

    async def list_audit_entries(self, record_id: str) -> list[AuditEntry]:
        return [e for e in self._audit if e.record_id == record_id]


class InMemoryEmployeeDirectory:
    """Dict-backed employee directory."""

    def __init__(
        self,
        employees: list[Employee] | None = None,
        departments: list[Department] | None = None,
    ) -> None:
        self._employees = {e.id: e for e in employees or []}
        self._departments = {d.id: d for d in departments or []}

    def add_employee(self, employee: Employee) -> None:
        self._employees[employee.id] = employee

    def add_department(self, department: Department) -> None:
        self._departments[department.id] = department

    async def get_employee(self, employee_id: str) -> Employee | None:
        return self._employees.get(employee_id)

    async def list_employees(
        self,
        department_id: str | None = None,
        is_active: bool | None = None,
    ) -> list[Employee]:
        return sorted(
            (
                e
                for e in self._employees.values()
                if (department_id is None or e.department_id == department_id)
                and (is_active is None or e.is_active == is_active)
            ),
            key=lambda e: e.id,
        )

    async def get_department(self, department_id: str) -> Department | None:
        return self._departments.get(department_id)

    async def list_departments(self, is_active: bool | None = None) -> list[Department]:
        return sorted(
            (
                d
                for d in self._departments.values()
                if is_active is None or d.is_active == is_active
            ),
            key=lambda d: d.id,
        )
