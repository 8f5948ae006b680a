"""Tests for the attendance record state machine."""

from datetime import timedelta
from decimal import Decimal

import pytest

from attendance_payroll.domain import AttendanceRecord, AttendanceStatus
from attendance_payroll.errors import (
    AlreadyMarkedError,
    InvalidRequestError,
    InvalidTimeOrderError,
    NoEntryRecordedError,
)
from attendance_payroll.services.state_machine import (
    AttendanceStateMachine,
    PunchKind,
    overtime_from_times,
)

from .conftest import TODAY, at

EIGHT = Decimal("8")


def pending(day=TODAY, hour=9):
    return AttendanceRecord(
        employee_id="E001",
        work_date=day,
        status=AttendanceStatus.PENDING,
        entry_time=at(day, hour),
        version=1,
    )


class TestTransitions:
    """Test punch transition table."""

    def test_valid_transitions(self):
        """Test that valid punch transitions are allowed."""
        # no record → pending
        assert AttendanceStateMachine.can_transition(
            PunchKind.ENTRY, None, AttendanceStatus.PENDING
        ) is True

        # absent → pending
        assert AttendanceStateMachine.can_transition(
            PunchKind.ENTRY, AttendanceStatus.ABSENT, AttendanceStatus.PENDING
        ) is True

        # pending → present
        assert AttendanceStateMachine.can_transition(
            PunchKind.EXIT, AttendanceStatus.PENDING, AttendanceStatus.PRESENT
        ) is True

    def test_invalid_transitions(self):
        """Test that invalid punch transitions are blocked."""
        # Can't enter twice
        assert AttendanceStateMachine.can_transition(
            PunchKind.ENTRY, AttendanceStatus.PENDING, AttendanceStatus.PENDING
        ) is False
        assert AttendanceStateMachine.can_transition(
            PunchKind.ENTRY, AttendanceStatus.PRESENT, AttendanceStatus.PENDING
        ) is False

        # Can't exit without entering
        assert AttendanceStateMachine.can_transition(
            PunchKind.EXIT, None, AttendanceStatus.PRESENT
        ) is False
        assert AttendanceStateMachine.can_transition(
            PunchKind.EXIT, AttendanceStatus.PRESENT, AttendanceStatus.PRESENT
        ) is False

        # Punches never produce half days
        assert AttendanceStateMachine.can_transition(
            PunchKind.EXIT, AttendanceStatus.PENDING, AttendanceStatus.HALF_DAY
        ) is False

    def test_any_status_is_a_correction_target(self):
        for status in AttendanceStatus:
            assert AttendanceStateMachine.can_correct_to(status) is True


class TestApplyEntry:
    def test_entry_creates_pending_record(self):
        record = AttendanceStateMachine.apply_entry(None, "E001", TODAY, at(TODAY, 9))

        assert record.status == AttendanceStatus.PENDING
        assert record.entry_time == at(TODAY, 9)
        assert record.exit_time is None
        assert record.version == 0
        assert record.last_modified_by == "E001"

    def test_entry_on_absent_record(self):
        absent = AttendanceRecord.inferred_absent("E001", TODAY)

        record = AttendanceStateMachine.apply_entry(
            absent, "E001", TODAY, at(TODAY, 9), actor_id="kiosk-1", request_key="k1"
        )

        assert record.status == AttendanceStatus.PENDING
        assert record.last_modified_by == "kiosk-1"
        assert record.last_request_key == "k1"

    def test_second_entry_raises(self):
        with pytest.raises(AlreadyMarkedError) as exc_info:
            AttendanceStateMachine.apply_entry(pending(), "E001", TODAY, at(TODAY, 10))

        assert exc_info.value.employee_id == "E001"
        assert exc_info.value.work_date == TODAY

    def test_entry_after_exit_raises(self):
        closed = AttendanceStateMachine.apply_exit(
            pending(), "E001", TODAY, at(TODAY, 17), EIGHT
        )
        with pytest.raises(AlreadyMarkedError):
            AttendanceStateMachine.apply_entry(closed, "E001", TODAY, at(TODAY, 18))

    def test_naive_timestamp_rejected(self):
        with pytest.raises(InvalidRequestError):
            AttendanceStateMachine.apply_entry(
                None, "E001", TODAY, at(TODAY, 9).replace(tzinfo=None)
            )


class TestApplyExit:
    def test_exit_completes_record(self):
        record = AttendanceStateMachine.apply_exit(
            pending(), "E001", TODAY, at(TODAY, 17), EIGHT
        )

        assert record.status == AttendanceStatus.PRESENT
        assert record.exit_time == at(TODAY, 17)
        assert record.overtime_hours == Decimal("0.00")
        assert record.work_duration_minutes == 8 * 60

    def test_exit_derives_overtime(self):
        record = AttendanceStateMachine.apply_exit(
            pending(hour=8), "E001", TODAY, at(TODAY, 18, 30), EIGHT
        )

        assert record.overtime_hours == Decimal("2.50")

    def test_exit_without_entry_raises(self):
        with pytest.raises(NoEntryRecordedError):
            AttendanceStateMachine.apply_exit(None, "E001", TODAY, at(TODAY, 17), EIGHT)

    def test_exit_on_present_record_raises(self):
        closed = AttendanceStateMachine.apply_exit(
            pending(), "E001", TODAY, at(TODAY, 17), EIGHT
        )
        with pytest.raises(NoEntryRecordedError):
            AttendanceStateMachine.apply_exit(closed, "E001", TODAY, at(TODAY, 18), EIGHT)

    def test_exit_before_entry_raises(self):
        record = pending(hour=9)

        with pytest.raises(InvalidTimeOrderError) as exc_info:
            AttendanceStateMachine.apply_exit(record, "E001", TODAY, at(TODAY, 8), EIGHT)

        assert exc_info.value.entry_time == at(TODAY, 9)
        assert exc_info.value.exit_time == at(TODAY, 8)
        assert record.status == AttendanceStatus.PENDING

    def test_naive_timestamp_rejected(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            AttendanceStateMachine.apply_exit(
                pending(), "E001", TODAY, at(TODAY, 17).replace(tzinfo=None), EIGHT
            )

        assert exc_info.value.code == "INVALID_REQUEST"
        assert exc_info.value.field == "timestamp"

    def test_exit_equal_to_entry_allowed(self):
        record = AttendanceStateMachine.apply_exit(
            pending(hour=9), "E001", TODAY, at(TODAY, 9), EIGHT
        )
        assert record.work_duration_minutes == 0


class TestOvertimeFromTimes:
    def test_no_overtime_within_standard_day(self):
        assert overtime_from_times(at(TODAY, 9), at(TODAY, 16), EIGHT) == Decimal("0.00")

    def test_rounds_to_hundredths(self):
        start = at(TODAY, 9)
        end = start + timedelta(hours=8, minutes=20)
        assert overtime_from_times(start, end, EIGHT) == Decimal("0.33")
