"""Store contracts consumed by the attendance and payroll services.

The services never talk to a database directly. Any persistence that
implements these protocols can back them.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol

from attendance_payroll.domain import (
    AttendanceRecord,
    AttendanceStatus,
    AuditEntry,
    Department,
    Employee,
)


class AttendanceStore(Protocol):
    """Persistence contract for attendance records and their audit trail.

    Writes are keyed by (employee_id, work_date) and use optimistic
    versioning: a record with version 0 is inserted and fails if a row
    already exists; any other version must match the stored version.
    Conflicts raise ConcurrentUpdateError. Timeouts and connection
    failures raise StoreUnavailableError.
    """

    async def get(self, employee_id: str, work_date: date) -> AttendanceRecord | None:
        """Return the stored record or None."""
        ...

    async def put(
        self,
        record: AttendanceRecord,
        audit_entry: AuditEntry | None = None,
    ) -> AttendanceRecord:
        """Atomically upsert a record, optionally appending an audit entry.

        Returns the stored record carrying its new version.
        """
        ...

    async def query(
        self,
        employee_id: str,
        start: date,
        end: date,
    ) -> list[AttendanceRecord]:
        """Stored records of one employee in [start, end], ordered by date."""
        ...

    async def search(
        self,
        *,
        employee_ids: list[str] | None = None,
        start: date | None = None,
        end: date | None = None,
        status: AttendanceStatus | None = None,
    ) -> list[AttendanceRecord]:
        """Stored records matching all given filters, ordered by (date, employee)."""
        ...

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        """Append to the correction history. Never overwrites."""
        ...

    async def list_audit_entries(self, record_id: str) -> list[AuditEntry]:
        """Correction history of one record, oldest first."""
        ...


class EmployeeDirectory(Protocol):
    """Read-only access to employee and department master data."""

    async def get_employee(self, employee_id: str) -> Employee | None:
        ...

    async def list_employees(
        self,
        department_id: str | None = None,
        is_active: bool | None = None,
    ) -> list[Employee]:
        ...

    async def get_department(self, department_id: str) -> Department | None:
        ...

    async def list_departments(self, is_active: bool | None = None) -> list[Department]:
        ...
