"""Monthly attendance aggregation.

Absence is sparse: a past day with no stored record counts as absent.
Nothing is ever written to materialise it.
"""

from __future__ import annotations

import calendar
from datetime import MAXYEAR, MINYEAR, date, timedelta
from decimal import Decimal
from typing import Iterable

from attendance_payroll.calculators.types import ZERO, MonthlyAggregate
from attendance_payroll.clock import Clock
from attendance_payroll.domain import AttendanceRecord, AttendanceStatus
from attendance_payroll.errors import InvalidRequestError
from attendance_payroll.stores.base import AttendanceStore

HALF = Decimal("0.5")
ONE = Decimal("1")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of (year, month)."""
    if not 1 <= month <= 12:
        raise InvalidRequestError("month", f"must be in 1..12, got {month}")
    if not MINYEAR <= year <= MAXYEAR:
        raise InvalidRequestError("year", f"must be in {MINYEAR}..{MAXYEAR}, got {year}")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def tally(
    employee_id: str,
    year: int,
    month: int,
    records: Iterable[AttendanceRecord],
    today: date,
) -> MonthlyAggregate:
    """Reduce stored records of a month into a MonthlyAggregate.

    Only days up to min(today, month end) are tallied. Today without a
    record is not yet determinable and is left out.
    """
    first, last = month_bounds(year, month)
    horizon = min(today, last)

    by_date = {
        r.work_date: r
        for r in records
        if r.employee_id == employee_id and first <= r.work_date <= horizon
    }

    present = ZERO
    absent = ZERO
    pending = 0
    half_days = 0
    overtime = ZERO
    elapsed = 0

    day = first
    while day <= horizon:
        elapsed += 1
        record = by_date.get(day)
        if record is None:
            if day < today:
                absent += ONE
        elif record.status == AttendanceStatus.PRESENT:
            present += ONE
            overtime += record.overtime_hours or ZERO
        elif record.status == AttendanceStatus.HALF_DAY:
            present += HALF
            absent += HALF
            half_days += 1
            overtime += record.overtime_hours or ZERO
        elif record.status == AttendanceStatus.PENDING:
            pending += 1
        else:
            absent += ONE
        day += timedelta(days=1)

    return MonthlyAggregate(
        employee_id=employee_id,
        year=year,
        month=month,
        days_in_month=(last - first).days + 1,
        days_elapsed=elapsed,
        days_present=present,
        days_absent=absent,
        days_pending=pending,
        days_half_day=half_days,
        total_overtime_hours=overtime,
    )


class MonthlyAggregator:
    """Reads one employee-month from the store and tallies it."""

    def __init__(self, store: AttendanceStore, clock: Clock):
        self.store = store
        self.clock = clock

    async def aggregate(self, employee_id: str, year: int, month: int) -> MonthlyAggregate:
        # "today" is fixed once for the whole call
        today = self.clock.today()
        first, last = month_bounds(year, month)
        horizon = min(today, last)

        records: list[AttendanceRecord] = []
        if horizon >= first:
            records = await self.store.query(employee_id, first, horizon)
        return tally(employee_id, year, month, records, today)
