"""Tests for time margin arithmetic."""

from datetime import UTC, datetime, timedelta

import pytest

from agora.core.modules.action.timing import compute_time_margin, format_time_margin, parse_start_time

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)


class TestParseStartTime:
    """Tests for parse_start_time function."""

    def test_aware_datetime_unchanged(self):
        """Test that aware datetimes pass through."""
        assert parse_start_time(NOW) == NOW

    def test_naive_datetime_treated_as_utc(self):
        """Test that naive datetimes, as stored by older drivers, are read as UTC."""
        assert parse_start_time(datetime(2025, 3, 1, 12, 0, 0)) == NOW

    def test_iso_string(self):
        """Test that ISO strings are parsed."""
        assert parse_start_time("2025-03-01T12:00:00+00:00") == NOW
        assert parse_start_time("2025-03-01T12:00:00") == NOW

    @pytest.mark.parametrize("value", [None, "", "invalid-date-string", 12345, []])
    def test_missing_or_malformed(self, value):
        """Test that missing or malformed values become None."""
        assert parse_start_time(value) is None


class TestComputeTimeMargin:
    """Tests for compute_time_margin function."""

    def test_seconds_not_milliseconds(self):
        """Test that the margin is expressed in fractional seconds."""
        assert compute_time_margin(NOW - timedelta(milliseconds=2500), NOW) == 2.5

    def test_future_start_is_negative(self):
        """Test that a start time in the future gives a negative margin."""
        assert compute_time_margin(NOW + timedelta(seconds=2), NOW) == -2.0

    def test_missing_start(self):
        """Test that a missing start time gives None."""
        assert compute_time_margin(None, NOW) is None


class TestFormatTimeMargin:
    """Tests for format_time_margin function."""

    def test_none(self):
        assert format_time_margin(None) is None

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0 seconds ago"),
            (1, "1 second ago"),
            (1.9, "1 second ago"),
            (59, "59 seconds ago"),
            (60, "1 minute ago"),
            (65.7, "1 minute ago"),
            (3599, "59 minutes ago"),
            (3600, "1 hour ago"),
            (86399, "23 hours ago"),
            (86400, "1 day ago"),
            (259200, "3 days ago"),
        ],
    )
    def test_units(self, seconds, expected):
        """Test that the largest whole unit is used, floored."""
        assert format_time_margin(seconds) == expected
