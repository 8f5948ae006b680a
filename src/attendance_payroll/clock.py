"""Injectable wall clock.

Operations that depend on "now" (correction window, future-day exclusion,
punch work dates) read it through a Clock so tests can pin "today".
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo


class Clock:
    """Base clock. Subclasses provide now()."""

    def __init__(self, tz: tzinfo | str = timezone.utc) -> None:
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        """Calendar date of now() in the business timezone."""
        return self.now().astimezone(self.tz).date()

    def local_date(self, instant: datetime) -> date:
        """Calendar date of an instant in the business timezone."""
        return instant.astimezone(self.tz).date()


class SystemClock(Clock):
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, replays)."""

    def __init__(self, instant: datetime, tz: tzinfo | str = timezone.utc) -> None:
        super().__init__(tz)
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware instant")
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware instant")
        self._instant = instant
