"""Attendance payroll command line interface.

Provides operational tools for:
- Schema creation
- Single employee salary calculation
- Department and system salary reports

Usage:
    python -m attendance_payroll.cli init-db
    python -m attendance_payroll.cli salary --employee-id E1 --year 2026 --month 10
    python -m attendance_payroll.cli department-report --department-id D1 --year 2026 --month 10
    python -m attendance_payroll.cli system-report --year 2026 --month 10
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable

from attendance_payroll.clock import Clock, SystemClock
from attendance_payroll.config import Settings, get_settings
from attendance_payroll.database import create_tables, get_engine, make_session_factory
from attendance_payroll.errors import AttendancePayrollError
from attendance_payroll.services import SalaryService
from attendance_payroll.stores import SqlAttendanceStore, SqlEmployeeDirectory

logger = logging.getLogger(__name__)


def parse_month(s: str) -> int:
    """Parse a calendar month number."""
    value = int(s)
    if not 1 <= value <= 12:
        raise argparse.ArgumentTypeError("month must be between 1 and 12")
    return value


class PayrollCli:
    """Attendance payroll command line interface."""

    def __init__(self, settings: Settings | None = None, clock: Clock | None = None) -> None:
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.business_timezone)
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m attendance_payroll.cli",
            description="Attendance payroll operational tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")

        salary = subparsers.add_parser("salary", help="Calculate one employee's salary")
        salary.add_argument("--employee-id", required=True, help="Employee ID")
        self._add_period_arguments(salary)
        salary.add_argument(
            "--audit",
            action="store_true",
            help="Allow inactive employees (result carries a warning)",
        )

        department = subparsers.add_parser(
            "department-report",
            help="Salary report for one department",
        )
        department.add_argument("--department-id", required=True, help="Department ID")
        self._add_period_arguments(department)

        system = subparsers.add_parser(
            "system-report",
            help="Salary report across all active departments",
        )
        self._add_period_arguments(system)

        return parser

    @staticmethod
    def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--year", type=int, required=True, help="Calendar year")
        parser.add_argument("--month", type=parse_month, required=True, help="Month (1-12)")

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "init-db": self._cmd_init_db,
            "salary": self._cmd_salary,
            "department-report": self._cmd_department_report,
            "system-report": self._cmd_system_report,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return asyncio.run(handler(parsed))
        except AttendancePayrollError as e:
            print(f"ERROR [{e.code}]: {e.message}", file=sys.stderr)
            return 2

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""
        engine = get_engine(self.settings.database_url)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()
        print("Database tables created.")
        return 0

    async def _cmd_salary(self, args: argparse.Namespace) -> int:
        async def query(service: SalaryService) -> dict[str, Any]:
            calculation = await service.calculate_salary(
                args.employee_id, args.year, args.month, strict=not args.audit
            )
            return calculation.to_dict()

        return await self._print_query(query)

    async def _cmd_department_report(self, args: argparse.Namespace) -> int:
        async def query(service: SalaryService) -> dict[str, Any]:
            report = await service.get_department_report(
                args.department_id, args.year, args.month
            )
            return report.to_dict()

        return await self._print_query(query)

    async def _cmd_system_report(self, args: argparse.Namespace) -> int:
        async def query(service: SalaryService) -> dict[str, Any]:
            report = await service.get_system_report(args.year, args.month)
            return report.to_dict()

        return await self._print_query(query)

    async def _print_query(
        self,
        query: Callable[[SalaryService], Awaitable[dict[str, Any]]],
    ) -> int:
        """Run a salary query against the configured database and print JSON."""
        engine = get_engine(self.settings.database_url)
        session_factory = make_session_factory(engine)
        timeout = self.settings.store_timeout_seconds
        service = SalaryService(
            SqlAttendanceStore(session_factory, timeout),
            SqlEmployeeDirectory(session_factory, timeout),
            self.clock,
            policy=self.settings.payroll,
            concurrency=self.settings.report_concurrency,
            deadline_seconds=self.settings.report_deadline_seconds,
        )
        try:
            result = await query(service)
        finally:
            await engine.dispose()
        print(json.dumps(result, indent=2))
        return 0


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = PayrollCli(settings)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
