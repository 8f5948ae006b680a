"""Tests for settings and policy configuration."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from attendance_payroll.clock import FixedClock
from attendance_payroll.config import CorrectionPolicyConfig, PayrollPolicy, Settings


class TestPayrollPolicy:
    def test_defaults(self):
        policy = PayrollPolicy()

        assert policy.standard_daily_hours == Decimal("8")
        assert policy.overtime_multiplier == Decimal("1.5")
        assert policy.overtime_cap_hours is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"standard_daily_hours": Decimal("0")},
            {"overtime_multiplier": Decimal("0.5")},
            {"overtime_cap_hours": Decimal("-1")},
            {"currency_quantum": Decimal("0")},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            PayrollPolicy(**kwargs)


class TestCorrectionPolicyConfig:
    def test_defaults(self):
        config = CorrectionPolicyConfig()

        assert config.window_days == 7
        assert config.min_reason_length == 10

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            CorrectionPolicyConfig(window_days=0)


class TestSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./attendance.db")
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("BUSINESS_TIMEZONE", "Asia/Kolkata")
        monkeypatch.setenv("REPORT_DEADLINE_SECONDS", "2.5")
        monkeypatch.setenv("OVERTIME_MULTIPLIER", "2")
        monkeypatch.setenv("OVERTIME_CAP_HOURS", "40")
        monkeypatch.setenv("CORRECTION_WINDOW_DAYS", "5")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite+aiosqlite:///./attendance.db"
        assert settings.PORT == 9001
        assert settings.DEBUG is True
        assert settings.log_level == "DEBUG"
        assert settings.business_timezone == "Asia/Kolkata"
        assert settings.report_deadline_seconds == 2.5
        assert settings.payroll.overtime_multiplier == Decimal("2")
        assert settings.payroll.overtime_cap_hours == Decimal("40")
        assert settings.correction.window_days == 5

    def test_from_env_defaults(self, monkeypatch):
        for name in (
            "DATABASE_URL",
            "REPORT_DEADLINE_SECONDS",
            "OVERTIME_CAP_HOURS",
            "WRITE_RETRIES",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.report_deadline_seconds is None
        assert settings.payroll.overtime_cap_hours is None
        assert settings.write_retries == 3


class TestClock:
    def test_today_uses_business_timezone(self):
        # 20:00 UTC is already the next day in Kolkata (+05:30)
        clock = FixedClock(datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc), "Asia/Kolkata")

        assert clock.today().isoformat() == "2026-10-19"

    def test_naive_instant_rejected(self):
        with pytest.raises(ValueError):
            FixedClock(datetime(2026, 10, 19, 10, 0))
