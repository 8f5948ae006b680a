"""Salary API endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Path, Query

from attendance_payroll.api.dependencies import Salaries
from attendance_payroll.api.schemas import (
    DepartmentReportResponse,
    ErrorResponse,
    SalaryCalculationResponse,
    SystemReportResponse,
)

router = APIRouter(prefix="/salaries", tags=["salaries"])

Year = Annotated[int, Query(ge=1900, le=9999)]
Month = Annotated[int, Query(ge=1, le=12)]


@router.get(
    "",
    response_model=list[SalaryCalculationResponse],
    responses={504: {"model": ErrorResponse}},
)
async def list_salaries(
    service: Salaries,
    year: Year,
    month: Month,
    department_id: str | None = None,
    sort_by: Literal["name", "department", "salary", "attendance"] = "name",
    descending: bool = False,
) -> list[SalaryCalculationResponse]:
    """Salaries of all active employees for a month."""
    calculations = await service.list_salaries(
        year,
        month,
        department_id=department_id,
        sort_by=sort_by,
        descending=descending,
    )
    return [SalaryCalculationResponse.model_validate(c.to_dict()) for c in calculations]


@router.get(
    "/employees/{employee_id}",
    response_model=SalaryCalculationResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def get_employee_salary(
    service: Salaries,
    employee_id: Annotated[str, Path()],
    year: Year,
    month: Month,
    audit: bool = False,
) -> SalaryCalculationResponse:
    """Salary of one employee. audit=true allows inactive employees."""
    calculation = await service.calculate_salary(
        employee_id, year, month, strict=not audit
    )
    return SalaryCalculationResponse.model_validate(calculation.to_dict())


@router.get(
    "/departments/{department_id}",
    response_model=DepartmentReportResponse,
    responses={404: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def get_department_report(
    service: Salaries,
    department_id: Annotated[str, Path()],
    year: Year,
    month: Month,
) -> DepartmentReportResponse:
    """Salary report of one department."""
    report = await service.get_department_report(department_id, year, month)
    return DepartmentReportResponse.model_validate(report.to_dict())


@router.get(
    "/system",
    response_model=SystemReportResponse,
    responses={504: {"model": ErrorResponse}},
)
async def get_system_report(
    service: Salaries,
    year: Year,
    month: Month,
) -> SystemReportResponse:
    """Salary report across all active departments."""
    report = await service.get_system_report(year, month)
    return SystemReportResponse.model_validate(report.to_dict())
