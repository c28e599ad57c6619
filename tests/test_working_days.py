"""Tests for the deadline calendar helpers and rounding."""

from datetime import date, datetime

import pytest

from taskflow.errors import InvalidArgument
from taskflow.utils.clock import round_half_up
from taskflow.utils.working_days import (
    buffer_days_for,
    buffer_deadline_for,
    month_range,
    subtract_working_days,
    week_range,
)


class TestSubtractWorkingDays:
    def test_saturday_counts_as_working_day(self):
        """Monday minus one working day skips Sunday and lands on Saturday."""
        assert subtract_working_days(date(2024, 6, 10), 1) == date(2024, 6, 8)

    def test_two_days_back_from_monday(self):
        assert subtract_working_days(date(2024, 6, 10), 2) == date(2024, 6, 7)

    def test_zero_days_returns_input(self):
        assert subtract_working_days(date(2024, 6, 9), 0) == date(2024, 6, 9)

    def test_never_lands_on_sunday(self):
        start = date(2024, 6, 1)
        for offset in range(1, 15):
            assert subtract_working_days(start, offset).weekday() != 6

    def test_across_month_boundary(self):
        # 2024-07-01 is a Monday
        assert subtract_working_days(date(2024, 7, 1), 2) == date(2024, 6, 28)

    @pytest.mark.parametrize("days", [-1, 1.5, "2", True])
    def test_invalid_day_counts(self, days):
        with pytest.raises(InvalidArgument):
            subtract_working_days(date(2024, 6, 10), days)

    @pytest.mark.parametrize("target", ["2024-06-10", None, datetime(2024, 6, 10, 12, 0)])
    def test_invalid_targets(self, target):
        with pytest.raises(InvalidArgument):
            subtract_working_days(target, 1)


class TestBufferDeadline:
    @pytest.mark.parametrize("urgency,expected", [
        ("critical", 0),
        ("high", 1),
        ("medium", 2),
        ("low", 2),
    ])
    def test_buffer_days(self, urgency, expected):
        assert buffer_days_for(urgency) == expected

    def test_critical_keeps_deadline(self):
        assert buffer_deadline_for(date(2024, 6, 12), "critical") == date(2024, 6, 12)

    def test_high_from_monday(self):
        assert buffer_deadline_for(date(2024, 6, 10), "high") == date(2024, 6, 8)

    def test_low_from_wednesday(self):
        assert buffer_deadline_for(date(2024, 6, 12), "low") == date(2024, 6, 10)


class TestRanges:
    def test_week_is_monday_to_saturday(self):
        assert week_range(date(2024, 6, 12)) == (date(2024, 6, 10), date(2024, 6, 15))

    def test_sunday_belongs_to_preceding_week(self):
        assert week_range(date(2024, 6, 16)) == (date(2024, 6, 10), date(2024, 6, 15))

    def test_leap_february(self):
        assert month_range(date(2024, 2, 15)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(68.75) == 69
        assert round_half_up(0.25, 1) == 0.3

    def test_below_half_rounds_down(self):
        assert round_half_up(68.49) == 68
