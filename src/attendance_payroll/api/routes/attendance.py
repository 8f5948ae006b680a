"""Attendance API endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from attendance_payroll.api.dependencies import (
    ActorId,
    Attendance,
    IdempotencyKey,
    RequiredActorId,
)
from attendance_payroll.api.schemas import (
    AttendanceRecordResponse,
    AuditEntryResponse,
    CorrectionRequestBody,
    ErrorResponse,
    PunchRequest,
)
from attendance_payroll.domain import AttendanceStatus

router = APIRouter(prefix="/attendance", tags=["attendance"])


# ============================================================================
# Punches
# ============================================================================


@router.post(
    "/{employee_id}/entry",
    response_model=AttendanceRecordResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def mark_entry(
    service: Attendance,
    actor_id: ActorId,
    idempotency_key: IdempotencyKey,
    employee_id: Annotated[str, Path()],
    payload: PunchRequest | None = None,
) -> AttendanceRecordResponse:
    """Record today's entry punch."""
    record = await service.mark_entry(
        employee_id,
        timestamp=payload.timestamp if payload else None,
        actor_id=actor_id,
        idempotency_key=idempotency_key,
    )
    return AttendanceRecordResponse.model_validate(record)


@router.post(
    "/{employee_id}/exit",
    response_model=AttendanceRecordResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def mark_exit(
    service: Attendance,
    actor_id: ActorId,
    idempotency_key: IdempotencyKey,
    employee_id: Annotated[str, Path()],
    payload: PunchRequest | None = None,
) -> AttendanceRecordResponse:
    """Record today's exit punch."""
    record = await service.mark_exit(
        employee_id,
        timestamp=payload.timestamp if payload else None,
        actor_id=actor_id,
        idempotency_key=idempotency_key,
    )
    return AttendanceRecordResponse.model_validate(record)


# ============================================================================
# Reads
# ============================================================================


@router.get(
    "/{employee_id}/records/{work_date}",
    response_model=AttendanceRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_record(
    service: Attendance,
    employee_id: Annotated[str, Path()],
    work_date: Annotated[date, Path()],
) -> AttendanceRecordResponse:
    """Get a record. Past days without one are reported absent."""
    record = await service.get_record(employee_id, work_date)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No attendance recorded for this date",
        )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/{employee_id}/correctable",
    response_model=list[AttendanceRecordResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_correctable_records(
    service: Attendance,
    employee_id: Annotated[str, Path()],
) -> list[AttendanceRecordResponse]:
    """Records inside the correction window, newest first."""
    records = await service.correctable_records(employee_id)
    return [AttendanceRecordResponse.model_validate(r) for r in records]


@router.get(
    "/records",
    response_model=list[AttendanceRecordResponse],
)
async def search_records(
    service: Attendance,
    employee_id: str | None = None,
    department_id: str | None = None,
    work_date: Annotated[date | None, Query(alias="date")] = None,
    status_filter: Annotated[AttendanceStatus | None, Query(alias="status")] = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[AttendanceRecordResponse]:
    """Search stored records with optional filters."""
    records = await service.list_records(
        employee_id=employee_id,
        department_id=department_id,
        work_date=work_date,
        status=status_filter,
        start=start_date,
        end=end_date,
    )
    return [AttendanceRecordResponse.model_validate(r) for r in records]


# ============================================================================
# Corrections
# ============================================================================


@router.post(
    "/records/{record_id}/correction",
    response_model=AttendanceRecordResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def correct_record(
    service: Attendance,
    actor_id: RequiredActorId,
    idempotency_key: IdempotencyKey,
    record_id: Annotated[str, Path()],
    payload: CorrectionRequestBody,
) -> AttendanceRecordResponse:
    """Correct a past record. The audit entry is written atomically."""
    record = await service.correct(
        record_id,
        new_status=payload.status,
        reason=payload.reason,
        actor_id=actor_id,
        new_entry=payload.entry_time,
        new_exit=payload.exit_time,
        overtime_hours=payload.overtime_hours,
        idempotency_key=idempotency_key,
    )
    return AttendanceRecordResponse.model_validate(record)


@router.get(
    "/records/{record_id}/history",
    response_model=list[AuditEntryResponse],
    responses={400: {"model": ErrorResponse}},
)
async def get_record_history(
    service: Attendance,
    record_id: Annotated[str, Path()],
) -> list[AuditEntryResponse]:
    """Correction history of a record, oldest first."""
    entries = await service.get_history(record_id)
    return [AuditEntryResponse.model_validate(e) for e in entries]
