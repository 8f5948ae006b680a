"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendance_payroll.api.routes import attendance_router, health_router, salary_router
from attendance_payroll.clock import Clock, SystemClock
from attendance_payroll.config import Settings, get_settings
from attendance_payroll.database import create_tables, dispose_db, init_db
from attendance_payroll.errors import AttendancePayrollError
from attendance_payroll.services import AttendanceService, CorrectionPolicy, SalaryService
from attendance_payroll.stores import (
    AttendanceStore,
    EmployeeDirectory,
    SqlAttendanceStore,
    SqlEmployeeDirectory,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[str, int] = {
    "ALREADY_MARKED": status.HTTP_409_CONFLICT,
    "NO_ENTRY_RECORDED": status.HTTP_409_CONFLICT,
    "INVALID_TIME_ORDER": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "PUNCH_DATE_MISMATCH": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "REASON_TOO_SHORT": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "OUTSIDE_CORRECTION_WINDOW": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INCOMPLETE_TIMES": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INACTIVE_EMPLOYEE": status.HTTP_409_CONFLICT,
    "EMPLOYEE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DEPARTMENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_RECORD_ID": status.HTTP_400_BAD_REQUEST,
    "INVALID_REQUEST": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "MALFORMED_EMPLOYEE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "CONCURRENT_UPDATE": status.HTTP_409_CONFLICT,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
    "DEADLINE_EXCEEDED": status.HTTP_504_GATEWAY_TIMEOUT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    engine = app.state.engine
    if engine is not None and settings.create_tables:
        await create_tables(engine)
        logger.info("Database tables ensured")
    yield
    if engine is not None:
        await dispose_db()


def create_app(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    attendance_store: AttendanceStore | None = None,
    directory: EmployeeDirectory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores default to the SQL implementations on the configured database.
    Passing stores (or a session factory) wires the app to them instead.
    """
    settings = settings or get_settings()
    clock = clock or SystemClock(settings.business_timezone)

    engine = None
    if attendance_store is None or directory is None:
        if session_factory is None:
            engine, session_factory = init_db(settings.database_url)
        timeout = settings.store_timeout_seconds
        if attendance_store is None:
            attendance_store = SqlAttendanceStore(session_factory, timeout)
        if directory is None:
            directory = SqlEmployeeDirectory(session_factory, timeout)

    app = FastAPI(
        title="Attendance Payroll API",
        description="Attendance lifecycle and monthly payroll",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.attendance_service = AttendanceService(
        attendance_store,
        directory,
        clock,
        policy=CorrectionPolicy(settings.correction, settings.payroll),
        write_retries=settings.write_retries,
    )
    app.state.salary_service = SalaryService(
        attendance_store,
        directory,
        clock,
        policy=settings.payroll,
        concurrency=settings.report_concurrency,
        deadline_seconds=settings.report_deadline_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AttendancePayrollError)
    async def domain_exception_handler(
        request: Request, exc: AttendancePayrollError
    ) -> JSONResponse:
        """Map structured errors to their HTTP status."""
        status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    app.include_router(health_router)
    app.include_router(attendance_router, prefix="/api/v1")
    app.include_router(salary_router, prefix="/api/v1")

    return app
