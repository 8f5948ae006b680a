"""SQLAlchemy-backed implementations of the store contracts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import date
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendance_payroll.domain import (
    AttendanceRecord,
    AttendanceStatus,
    AuditEntry,
    Department,
    Employee,
)
from attendance_payroll.errors import ConcurrentUpdateError, StoreUnavailableError
from attendance_payroll.models import (
    AttendanceAuditRow,
    AttendanceRecordRow,
    DepartmentRow,
    EmployeeRow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _SqlStore:
    """Shared session, timeout and error translation for SQL stores."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float | None = 5.0,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout_seconds

    async def _run(
        self,
        operation: str,
        fn: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run fn in its own transaction, bounded by the store timeout."""
        try:
            return await asyncio.wait_for(self._in_transaction(fn), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Store operation %s timed out after %ss", operation, self._timeout)
            raise StoreUnavailableError(operation, f"timed out after {self._timeout}s")
        except IntegrityError:
            raise
        except (DBAPIError, OSError) as e:
            logger.warning("Store operation %s failed: %s", operation, e)
            raise StoreUnavailableError(operation, str(e)) from e

    async def _in_transaction(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self._session_factory() as session:
            async with session.begin():
                return await fn(session)


class SqlAttendanceStore(_SqlStore):
    """Attendance store over the attendance_record / attendance_audit tables."""

    async def get(self, employee_id: str, work_date: date) -> AttendanceRecord | None:
        async def _get(session: AsyncSession) -> AttendanceRecord | None:
            result = await session.execute(
                select(AttendanceRecordRow).where(
                    AttendanceRecordRow.employee_id == employee_id,
                    AttendanceRecordRow.work_date == work_date,
                )
            )
            row = result.scalar_one_or_none()
            return row.to_domain() if row is not None else None

        return await self._run("get", _get)

    async def put(
        self,
        record: AttendanceRecord,
        audit_entry: AuditEntry | None = None,
    ) -> AttendanceRecord:
        async def _put(session: AsyncSession) -> AttendanceRecord:
            new_version = record.version + 1

            if record.version == 0:
                session.add(AttendanceRecordRow.from_domain(record, version=new_version))
                try:
                    await session.flush()
                except IntegrityError:
                    raise ConcurrentUpdateError(record.record_id, record.version)
            else:
                result = await session.execute(
                    update(AttendanceRecordRow)
                    .where(
                        AttendanceRecordRow.record_id == record.record_id,
                        AttendanceRecordRow.version == record.version,
                    )
                    .values(
                        version=new_version,
                        **AttendanceRecordRow.values_from_domain(record),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise ConcurrentUpdateError(record.record_id, record.version)

            if audit_entry is not None:
                session.add(AttendanceAuditRow.from_domain(audit_entry))
                await session.flush()

            return replace(record, version=new_version)

        return await self._run("put", _put)

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
        async def _search(session: AsyncSession) -> list[AttendanceRecord]:
            query = select(AttendanceRecordRow)
            if employee_ids is not None:
                query = query.where(AttendanceRecordRow.employee_id.in_(employee_ids))
            if start is not None:
                query = query.where(AttendanceRecordRow.work_date >= start)
            if end is not None:
                query = query.where(AttendanceRecordRow.work_date <= end)
            if status is not None:
                query = query.where(AttendanceRecordRow.status == status.value)
            query = query.order_by(
                AttendanceRecordRow.work_date, AttendanceRecordRow.employee_id
            )
            result = await session.execute(query)
            return [row.to_domain() for row in result.scalars().all()]

        return await self._run("search", _search)

    async def append_audit_entry(self, entry: AuditEntry) -> None:
        async def _append(session: AsyncSession) -> None:
            session.add(AttendanceAuditRow.from_domain(entry))
            await session.flush()

        await self._run("append_audit_entry", _append)

    async def list_audit_entries(self, record_id: str) -> list[AuditEntry]:
        async def _list(session: AsyncSession) -> list[AuditEntry]:
            result = await session.execute(
                select(AttendanceAuditRow)
                .where(AttendanceAuditRow.record_id == record_id)
                .order_by(AttendanceAuditRow.recorded_at, AttendanceAuditRow.audit_id)
            )
            return [row.to_domain() for row in result.scalars().all()]

        return await self._run("list_audit_entries", _list)


class SqlEmployeeDirectory(_SqlStore):
    """Employee directory over the employee / department tables."""

    async def get_employee(self, employee_id: str) -> Employee | None:
        async def _get(session: AsyncSession) -> Employee | None:
            row = await session.get(EmployeeRow, employee_id)
            return row.to_domain() if row is not None else None

        return await self._run("get_employee", _get)

    async def list_employees(
        self,
        department_id: str | None = None,
        is_active: bool | None = None,
    ) -> list[Employee]:
        async def _list(session: AsyncSession) -> list[Employee]:
            query = select(EmployeeRow)
            if department_id is not None:
                query = query.where(EmployeeRow.department_id == department_id)
            if is_active is not None:
                query = query.where(EmployeeRow.is_active == is_active)
            result = await session.execute(query.order_by(EmployeeRow.employee_id))
            return [row.to_domain() for row in result.scalars().all()]

        return await self._run("list_employees", _list)

    async def get_department(self, department_id: str) -> Department | None:
        async def _get(session: AsyncSession) -> Department | None:
            row = await session.get(DepartmentRow, department_id)
            return row.to_domain() if row is not None else None

        return await self._run("get_department", _get)

    async def list_departments(self, is_active: bool | None = None) -> list[Department]:
        async def _list(session: AsyncSession) -> list[Department]:
            query = select(DepartmentRow)
            if is_active is not None:
                query = query.where(DepartmentRow.is_active == is_active)
            result = await session.execute(query.order_by(DepartmentRow.department_id))
            return [row.to_domain() for row in result.scalars().all()]

        return await self._run("list_departments", _list)
