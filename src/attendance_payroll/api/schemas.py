"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from attendance_payroll.domain import AttendanceStatus


# ============================================================================
# Attendance schemas
# ============================================================================


class PunchRequest(BaseModel):
    """Schema for an entry or exit punch. Defaults to the server's now."""

    timestamp: AwareDatetime | None = None


class CorrectionRequestBody(BaseModel):
    """Schema for correcting a past record."""

    status: AttendanceStatus
    reason: str
    entry_time: AwareDatetime | None = None
    exit_time: AwareDatetime | None = None
    overtime_hours: Decimal | None = Field(default=None, ge=0)


class AttendanceRecordResponse(BaseModel):
    """Schema for an attendance record, stored or inferred."""

    model_config = ConfigDict(from_attributes=True)

    record_id: str
    employee_id: str
    work_date: date
    status: AttendanceStatus
    entry_time: datetime | None = None
    exit_time: datetime | None = None
    work_duration_minutes: int | None = None
    is_corrected: bool
    correction_reason: str | None = None
    last_modified_by: str | None = None
    overtime_hours: Decimal | None = None
    version: int


class AuditEntryResponse(BaseModel):
    """Schema for one correction in a record's history."""

    model_config = ConfigDict(from_attributes=True)

    audit_id: UUID
    record_id: str
    employee_id: str
    work_date: date
    actor_id: str
    recorded_at: datetime
    reason: str
    before: dict[str, Any] | None = None
    after: dict[str, Any]


# ============================================================================
# Salary schemas
# ============================================================================


class SalaryCalculationResponse(BaseModel):
    """Schema for one employee's monthly salary."""

    employee_id: str
    employee_code: str
    employee_name: str
    department_id: str | None = None
    month: str
    year: int
    month_number: int
    days_in_month: int
    days_present: Decimal
    days_absent: Decimal
    days_pending: int
    monthly_salary: Decimal
    daily_rate: Decimal
    base_salary: Decimal
    overtime_hours: Decimal
    overtime_pay: Decimal
    calculated_salary: Decimal
    deduction_amount: Decimal
    deduction_percentage: Decimal
    attendance_percentage: Decimal
    employee_active: bool
    warnings: list[str] = Field(default_factory=list)


class DepartmentSummaryResponse(BaseModel):
    """Schema for department totals."""

    total_monthly_salary: Decimal
    total_calculated_salary: Decimal
    total_base_salary: Decimal
    total_overtime_pay: Decimal
    total_deduction: Decimal
    overtime_surplus: Decimal
    average_days_present: Decimal


class DepartmentReportResponse(BaseModel):
    """Schema for a department salary report."""

    department_id: str
    month: str
    employee_count: int
    salaries: list[SalaryCalculationResponse]
    summary: DepartmentSummaryResponse


class SystemTotalResponse(BaseModel):
    """Schema for system-wide totals."""

    total_employees: int
    total_monthly_salary: Decimal
    total_calculated_salary: Decimal
    total_deduction: Decimal
    overtime_surplus: Decimal
    deduction_percentage: Decimal


class SystemReportResponse(BaseModel):
    """Schema for the system salary report."""

    month: str
    department_count: int
    departments: list[DepartmentReportResponse]
    system_total: SystemTotalResponse


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
