"""
Tests for duration parsing and formatting.
"""

from datetime import timedelta

import pytest

from core.exceptions import InvalidDurationException
from core.utils.time_utils import format_duration, parse_duration

# =============================================================================
# parse_duration
# =============================================================================


@pytest.mark.unit
class TestParseDuration:
    """Go-style duration strings and bare seconds."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("0", timedelta(0)),
            ("0s", timedelta(0)),
            ("5s", timedelta(seconds=5)),
            ("1.5s", timedelta(seconds=1.5)),
            ("300ms", timedelta(milliseconds=300)),
            ("2m", timedelta(minutes=2)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("1m30s", timedelta(seconds=90)),
            ("250us", timedelta(microseconds=250)),
            ("10", timedelta(seconds=10)),
            (" 3s ", timedelta(seconds=3)),
        ],
    )
    def test_parses_strings(self, text, expected):
        assert parse_duration(text) == expected

    def test_negative_duration(self):
        assert parse_duration("-2s") == timedelta(seconds=-2)

    def test_numbers_are_seconds(self):
        assert parse_duration(3) == timedelta(seconds=3)
        assert parse_duration(0.5) == timedelta(milliseconds=500)

    def test_timedelta_passthrough(self):
        delta = timedelta(minutes=1)
        assert parse_duration(delta) is delta

    @pytest.mark.parametrize("text", ["", "abc", "5x", "s", "1.2.3s", "-", "5 s"])
    def test_rejects_garbage(self, text):
        with pytest.raises(InvalidDurationException):
            parse_duration(text)

    def test_rejects_booleans(self):
        with pytest.raises(InvalidDurationException):
            parse_duration(True)


# =============================================================================
# format_duration
# =============================================================================


@pytest.mark.unit
class TestFormatDuration:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(0), "0s"),
            (timedelta(milliseconds=250), "250ms"),
            (timedelta(seconds=3), "3s"),
            (timedelta(seconds=90), "1m30s"),
            (timedelta(hours=2, seconds=5), "2h0m5s"),
        ],
    )
    def test_formats(self, delta, expected):
        assert format_duration(delta) == expected

    def test_formats_parsed_value_back(self):
        assert format_duration(parse_duration("1m30s")) == "1m30s"
