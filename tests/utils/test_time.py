"""
Tests for time utilities.

Verifies UTC normalisation, RFC 3339 encoding and duration rendering.
"""

import pytest
from datetime import datetime, timezone, timedelta
from unittest.mock import patch

from tempo_app.errors import InvalidTimestampError
from tempo_app.utils.time import (
    elapsed_between,
    ensure_aware,
    format_duration,
    format_timestamp,
    parse_timestamp,
    utc_now,
)


class TestUtcNow:
    """Test utc_now function."""

    def test_returns_aware_utc(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_uses_wall_clock(self):
        with patch('tempo_app.utils.time.datetime') as mock_datetime:
            mock_now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
            mock_datetime.now.return_value = mock_now

            assert utc_now() == mock_now
            mock_datetime.now.assert_called_once_with(timezone.utc)


class TestEnsureAware:
    """Test ensure_aware function."""

    def test_naive_rejected(self):
        with pytest.raises(InvalidTimestampError):
            ensure_aware(datetime(2024, 1, 1, 12, 0, 0))

    def test_non_datetime_rejected(self):
        with pytest.raises(InvalidTimestampError):
            ensure_aware("2024-01-01T12:00:00+00:00")

    def test_offset_converted_to_utc(self):
        tz = timezone(timedelta(hours=-5))
        result = ensure_aware(datetime(2024, 1, 1, 7, 0, 0, tzinfo=tz))
        assert result == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc


class TestTimestampCodec:
    """Test RFC 3339 formatting and parsing."""

    def test_format_keeps_microseconds(self):
        ts = datetime(2024, 1, 1, 12, 0, 0, 42, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-01-01T12:00:00.000042+00:00"

    def test_parse_z_suffix(self):
        assert parse_timestamp("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_parse_nanoseconds_truncated(self):
        ts = parse_timestamp("2024-01-01T12:00:00.987654321+00:00")
        assert ts.microsecond == 987654

    def test_parse_offset_normalised(self):
        ts = parse_timestamp("2024-01-01T14:00:00+02:00")
        assert ts == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert ts.utcoffset() == timedelta(0)

    @pytest.mark.parametrize("text", ["2024-01-01T12:00:00", "not a time", ""])
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            parse_timestamp(text)

    def test_parse_rejects_non_text(self):
        with pytest.raises(ValueError):
            parse_timestamp(1700000000)

    def test_parse_rejects_out_of_range_utc(self):
        with pytest.raises(ValueError):
            parse_timestamp("0001-01-01T00:00:00+05:00")


class TestElapsedBetween:
    """Test elapsed_between function."""

    def test_exact_difference(self):
        start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        end = start + timedelta(hours=1, microseconds=3)
        assert elapsed_between(start, end) == timedelta(hours=1, microseconds=3)

    def test_defaults_to_now(self):
        start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        with patch('tempo_app.utils.time.utc_now', return_value=start + timedelta(seconds=5)):
            assert elapsed_between(start) == timedelta(seconds=5)


class TestFormatDuration:
    """Test duration rendering."""

    @pytest.mark.parametrize("elapsed, expected", [
        (timedelta(0), "0s"),
        (timedelta(seconds=59.9), "59s"),
        (timedelta(minutes=5), "5m"),
        (timedelta(hours=1, minutes=2, seconds=3), "1h 2m 3s"),
        (timedelta(days=2, seconds=7), "2d 7s"),
        (timedelta(seconds=-10), "0s"),
    ])
    def test_format(self, elapsed, expected):
        assert format_duration(elapsed) == expected

    def test_without_seconds(self):
        assert format_duration(timedelta(hours=1, seconds=30), show_seconds=False) == "1h"
        assert format_duration(timedelta(seconds=30), show_seconds=False) == "0m"
