"""
Duration parsing and formatting utilities
"""
import re
from datetime import timedelta
from typing import Union

from ..exceptions import InvalidDurationException

# Unit -> seconds
_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_NUMBER = re.compile(r"^[+-]?(\d+(?:\.\d*)?|\.\d+)$")


def parse_duration(value: Union[str, int, float, timedelta]) -> timedelta:
    """
    Parse a duration into a timedelta

    Supports formats:
        - "300ms", "1.5s", "2m", "1h30m"  (Go-style unit suffixes)
        - "0"                              (zero without unit)
        - "10", 10, 2.5                    (bare numbers are seconds)
        - timedelta                        (returned unchanged)

    Args:
        value: Duration string, number of seconds or timedelta

    Returns:
        Parsed timedelta (may be negative if a leading '-' was given)

    Raises:
        InvalidDurationException: if the value cannot be parsed
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise InvalidDurationException(value, "booleans are not durations")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise InvalidDurationException(value, f"unsupported type {type(value).__name__}")

    text = value.strip()
    if not text:
        raise InvalidDurationException(value, "empty string")

    if _NUMBER.match(text):
        return timedelta(seconds=float(text))

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
        if not text:
            raise InvalidDurationException(value)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if not match:
            raise InvalidDurationException(value)
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    return timedelta(seconds=sign * total)


def format_duration(delta: timedelta) -> str:
    """
    Format a timedelta in Go style

    Args:
        delta: Duration to format

    Returns:
        Formatted string like "0s", "250ms", "3s", "1m30s" or "2h0m5s"
    """
    total = delta.total_seconds()
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)

    if total < 1:
        millis = total * 1000
        return f"{sign}{millis:g}ms"

    hours = int(total // 3600)
    minutes = int((total % 3600) // 60)
    seconds = round(total % 60, 3)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds:g}s"
    if minutes:
        return f"{sign}{minutes}m{seconds:g}s"
    return f"{sign}{seconds:g}s"
