"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from attendance_payroll.services import AttendanceService, SalaryService


def get_attendance_service(request: Request) -> AttendanceService:
    return request.app.state.attendance_service


def get_salary_service(request: Request) -> SalaryService:
    return request.app.state.salary_service


async def get_actor_id(x_actor_id: Annotated[str | None, Header()] = None) -> str | None:
    """Actor performing the request, if given."""
    return x_actor_id or None


async def require_actor_id(x_actor_id: Annotated[str | None, Header()] = None) -> str:
    """Actor performing the request. Corrections must be attributed."""
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Actor-ID header is required",
        )
    return x_actor_id


async def get_idempotency_key(
    idempotency_key: Annotated[str | None, Header(max_length=100)] = None,
) -> str | None:
    return idempotency_key or None


# Type aliases for cleaner dependency injection
Attendance = Annotated[AttendanceService, Depends(get_attendance_service)]
Salaries = Annotated[SalaryService, Depends(get_salary_service)]
ActorId = Annotated[str | None, Depends(get_actor_id)]
RequiredActorId = Annotated[str, Depends(require_actor_id)]
IdempotencyKey = Annotated[str | None, Depends(get_idempotency_key)]
