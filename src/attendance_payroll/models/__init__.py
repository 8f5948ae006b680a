"""SQLAlchemy ORM models."""

from attendance_payroll.models.attendance import AttendanceAuditRow, AttendanceRecordRow
from attendance_payroll.models.base import Base, TimestampMixin, UTCDateTime
from attendance_payroll.models.employee import DepartmentRow, EmployeeRow

__all__ = [
    "AttendanceAuditRow",
    "AttendanceRecordRow",
    "Base",
    "DepartmentRow",
    "EmployeeRow",
    "TimestampMixin",
    "UTCDateTime",
]
