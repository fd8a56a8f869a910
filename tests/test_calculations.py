#!/usr/bin/env python3
"""Tests for calculation helper functions."""
from datetime import date, datetime, timezone

import pytest

from fleet import (
    HourMeterLogEntry,
    HourMeterSource,
    Status,
    calc_due_at,
    calc_remaining,
    check_status,
    estimate_usage_rate,
    project_due_date,
)
from fleet.calculations import days_between, format_timestamp, parse_timestamp


def entry(when, value):
    return HourMeterLogEntry(when, value, "collab_1", HourMeterSource.FUELING, "fuel_x")


class TestTimestamps:
    """Tests for timestamp parsing and normalization."""

    def test_z_suffix_is_utc(self):
        """Z suffix parses as UTC."""
        parsed = parse_timestamp("2023-10-26T10:00:00Z")
        assert parsed == datetime(2023, 10, 26, 10, tzinfo=timezone.utc)

    def test_naive_taken_as_utc(self):
        """Naive timestamps are taken as UTC."""
        parsed = parse_timestamp("2023-10-26T10:00:00")
        assert parsed.tzinfo is not None
        assert parsed == datetime(2023, 10, 26, 10, tzinfo=timezone.utc)

    def test_date_only(self):
        """A bare date parses to midnight."""
        assert parse_timestamp("2023-10-26").date() == date(2023, 10, 26)

    def test_format_normalizes(self):
        """Stored form is ISO-8601 with offset."""
        assert format_timestamp("2023-10-26T10:00:00Z") == "2023-10-26T10:00:00+00:00"

    def test_days_between_fractional(self):
        """Partial days count as fractions."""
        assert days_between("2025-01-01T00:00:00Z", "2025-01-02T12:00:00Z") == 1.5


class TestCalcDueAt:
    """Tests for calc_due_at helper function."""

    def test_last_plus_interval(self):
        """Due point is last service plus interval."""
        assert calc_due_at(1005, 250) == 1255

    def test_zero_interval_unmonitored(self):
        """Zero interval has no due point."""
        assert calc_due_at(1005, 0) is None

    def test_negative_interval_unmonitored(self):
        """Negative interval has no due point."""
        assert calc_due_at(1005, -10) is None

    def test_missing_values(self):
        """Missing last service or interval has no due point."""
        assert calc_due_at(None, 250) is None
        assert calc_due_at(1005, None) is None


class TestCalcRemaining:
    """Tests for calc_remaining helper function."""
    def test_positive_remaining(self):
        """Hours left before due."""
        assert calc_remaining(1255, 1245) == 10

    def test_overdue_is_negative(self):
        """Past the due point is negative."""
        assert calc_remaining(1255, 1300) == -45

    def test_none_due(self):
        """No due point means no remaining hours."""
        assert calc_remaining(None, 1245) is None


class TestCheckStatus:
    """Tests for check_status helper function."""

    def test_overdue(self):
        """Zero or negative remaining is OVERDUE."""
        assert check_status(-5, 50) == Status.OVERDUE
        assert check_status(0, 50) == Status.OVERDUE

    def test_due_soon(self):
        """Within the threshold is DUE_SOON."""
        assert check_status(10, 50) == Status.DUE_SOON
        assert check_status(50, 50) == Status.DUE_SOON

    def test_ok(self):
        """Beyond the threshold is OK."""
        assert check_status(51, 50) == Status.OK


class TestEstimateUsageRate:
    """Tests for the usage-per-day estimate."""

    def test_two_entries_ten_days_apart(self):
        """200h over 10 days is 20h/day."""
        history = [
            entry("2025-01-01T08:00:00Z", 1000),
            entry("2025-01-11T08:00:00Z", 1200),
        ]
        assert estimate_usage_rate(history) == pytest.approx(20)

    def test_single_entry_uses_default(self):
        """One entry is not enough for a rate."""
        assert estimate_usage_rate([entry("2025-01-01T08:00:00Z", 1000)]) == 4

    def test_empty_history_uses_default(self):
        """Empty ledger uses the default."""
        assert estimate_usage_rate([]) == 4

    def test_custom_default(self):
        """The default rate can be overridden."""
        assert estimate_usage_rate([], default=6) == 6

    def test_one_day_span_uses_default(self):
        """A span of one day is too short."""
        history = [
            entry("2025-01-01T08:00:00Z", 1000),
            entry("2025-01-02T08:00:00Z", 1020),
        ]
        assert estimate_usage_rate(history) == 4

    def test_uses_earliest_and_latest_by_date(self):
        """Order of the history list does not matter."""
        history = [
            entry("2025-01-11T08:00:00Z", 1200),
            entry("2025-01-05T08:00:00Z", 1150),
            entry("2025-01-01T08:00:00Z", 1000),
        ]
        assert estimate_usage_rate(history) == pytest.approx(20)

    def test_negative_delta_uses_default(self):
        """A falling counter uses the default."""
        history = [
            entry("2025-01-01T08:00:00Z", 1200),
            entry("2025-01-11T08:00:00Z", 1000),
        ]
        assert estimate_usage_rate(history) == 4

    def test_no_usage_uses_default(self):
        """An unchanged counter uses the default."""
        history = [
            entry("2025-01-01T08:00:00Z", 1000),
            entry("2025-01-11T08:00:00Z", 1000),
        ]
        assert estimate_usage_rate(history) == 4


class TestProjectDueDate:
    """Tests for project_due_date helper function."""
    def test_rounds_days_up(self):
        """Partial days round up."""
        assert project_due_date(10, 4, date(2025, 3, 1)) == date(2025, 3, 4)

    def test_exact_division(self):
        """Whole days are not rounded."""
        assert project_due_date(40, 20, date(2025, 3, 1)) == date(2025, 3, 3)

    def test_due_now(self):
        """Zero remaining is due today."""
        assert project_due_date(0, 4, date(2025, 3, 1)) == date(2025, 3, 1)

    def test_overdue_has_no_date(self):
        """Overdue has no projected date."""
        assert project_due_date(-1, 4, date(2025, 3, 1)) is None

    def test_zero_rate_has_no_date(self):
        """Zero rate has no projected date."""
        assert project_due_date(10, 0, date(2025, 3, 1)) is None
