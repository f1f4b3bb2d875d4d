"""
Duration formatting and parsing utilities
"""
import math
import re

from core.exceptions import DurationParseException


# Duration units, in seconds
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(duration_str: str) -> float:
    """
    Parse a compound duration string (e.g. "1h30m") to seconds

    Supports formats:
        - "24h" -> 86400
        - "1h30m" -> 5400
        - "1.5h" -> 5400
        - "90s", "500ms"
        - "3600" -> 3600 (bare number, seconds)

    Args:
        duration_str: Duration string

    Returns:
        Duration in seconds

    Raises:
        DurationParseException: if the string is empty, negative or malformed
            (a ValueError, so pydantic validators report it)
    """
    if duration_str is None:
        raise DurationParseException("duration", duration_str)

    text = duration_str.strip()
    if not text:
        raise DurationParseException("duration", duration_str)

    if text.startswith("-"):
        raise DurationParseException("duration", duration_str)
    if text.startswith("+"):
        text = text[1:]

    # Bare number (seconds)
    try:
        value = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(value):
            raise DurationParseException("duration", duration_str)
        return value

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise DurationParseException("duration", duration_str)
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise DurationParseException("duration", duration_str)

    return total


def format_duration(seconds: float) -> str:
    """
    Format seconds as a compound duration string

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "24h0m0s", "1m30s" or "0.5s"
    """
    if seconds < 0:
        return "-" + format_duration(-seconds)

    whole = int(seconds)
    fraction = seconds - whole

    if whole < 60:
        if fraction:
            return f"{seconds:g}s"
        return f"{whole}s"

    hours = whole // 3600
    minutes = (whole % 3600) // 60
    secs = whole % 60 + fraction
    secs_str = f"{secs:g}"

    if hours > 0:
        return f"{hours}h{minutes}m{secs_str}s"
    return f"{minutes}m{secs_str}s"
