"""Attendance record and correction audit models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from attendance_payroll.domain import AttendanceRecord, AttendanceStatus, AuditEntry
from attendance_payroll.models.base import Base, TimestampMixin, UTCDateTime


class AttendanceRecordRow(Base, TimestampMixin):
    """One row per (employee, work date).

    ``version`` implements optimistic concurrency: every write bumps it and
    updates are conditional on the version the writer read.
    """

    __tablename__ = "attendance_record"

    record_id: Mapped[str] = mapped_column(String(96), primary_key=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    entry_time: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    exit_time: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    is_corrected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    correction_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_modified_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_request_key: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="attendance_employee_date_unique"),
        CheckConstraint(
            "status IN ('absent', 'pending', 'present', 'half_day')",
            name="attendance_status_check",
        ),
        CheckConstraint(
            "exit_time IS NULL OR entry_time IS NULL OR exit_time >= entry_time",
            name="attendance_time_order_check",
        ),
    )

    @classmethod
    def from_domain(cls, record: AttendanceRecord, version: int) -> AttendanceRecordRow:
        return cls(
            record_id=record.record_id,
            version=version,
            **cls.values_from_domain(record),
        )

    @staticmethod
    def values_from_domain(record: AttendanceRecord) -> dict[str, Any]:
        """Column values for insert/update (excluding key and version)."""
        return {
            "employee_id": record.employee_id,
            "work_date": record.work_date,
            "status": record.status.value,
            "entry_time": record.entry_time,
            "exit_time": record.exit_time,
            "is_corrected": record.is_corrected,
            "correction_reason": record.correction_reason,
            "last_modified_by": record.last_modified_by,
            "overtime_hours": record.overtime_hours,
            "last_request_key": record.last_request_key,
        }

    def to_domain(self) -> AttendanceRecord:
        return AttendanceRecord(
            employee_id=self.employee_id,
            work_date=self.work_date,
            status=AttendanceStatus(self.status),
            entry_time=self.entry_time,
            exit_time=self.exit_time,
            is_corrected=self.is_corrected,
            correction_reason=self.correction_reason,
            last_modified_by=self.last_modified_by,
            overtime_hours=(
                Decimal(self.overtime_hours) if self.overtime_hours is not None else None
            ),
            version=self.version,
            last_request_key=self.last_request_key,
        )


class AttendanceAuditRow(Base):
    """Append-only correction history. Rows are never updated or deleted."""

    __tablename__ = "attendance_audit"

    audit_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    record_id: Mapped[str] = mapped_column(String(96), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    actor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    before_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    after_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> AttendanceAuditRow:
        return cls(
            audit_id=str(entry.audit_id),
            record_id=entry.record_id,
            employee_id=entry.employee_id,
            work_date=entry.work_date,
            actor_id=entry.actor_id,
            recorded_at=entry.recorded_at,
            reason=entry.reason,
            before_json=entry.before,
            after_json=entry.after,
        )

    def to_domain(self) -> AuditEntry:
        return AuditEntry(
            audit_id=UUID(self.audit_id),
            record_id=self.record_id,
            employee_id=self.employee_id,
            work_date=self.work_date,
            actor_id=self.actor_id,
            recorded_at=self.recorded_at,
            reason=self.reason,
            before=self.before_json,
            after=self.after_json,
        )
