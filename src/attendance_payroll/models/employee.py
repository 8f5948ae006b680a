"""Employee and department master data models."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from attendance_payroll.domain import Department, Employee
from attendance_payroll.models.base import Base, TimestampMixin


class DepartmentRow(Base, TimestampMixin):
    """Department record."""

    __tablename__ = "department"

    department_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    employees: Mapped[list[EmployeeRow]] = relationship(back_populates="department")

    def to_domain(self) -> Department:
        return Department(
            id=self.department_id,
            name=self.name,
            is_active=self.is_active,
        )


class EmployeeRow(Base, TimestampMixin):
    """Employee record."""

    __tablename__ = "employee"

    employee_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    employee_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    department_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("department.department_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    monthly_salary: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    overtime_eligible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("monthly_salary >= 0", name="employee_monthly_salary_check"),
    )

    department: Mapped[DepartmentRow | None] = relationship(back_populates="employees")

    def to_domain(self) -> Employee:
        return Employee(
            id=self.employee_id,
            employee_code=self.employee_code,
            name=self.name,
            department_id=self.department_id,
            monthly_salary=Decimal(self.monthly_salary),
            overtime_eligible=self.overtime_eligible,
            is_active=self.is_active,
        )
