"""API routes."""

from attendance_payroll.api.routes.attendance import router as attendance_router
from attendance_payroll.api.routes.health import router as health_router
from attendance_payroll.api.routes.salary import router as salary_router

__all__ = ["attendance_router", "health_router", "salary_router"]
