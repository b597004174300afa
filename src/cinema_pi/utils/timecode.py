"""
Conversions between human clock strings and whole seconds.

Pure functions with no engine or filesystem dependencies.
"""

import math
import re
from typing import Any

from cinema_pi.core.exceptions import InvalidTimeFormat, PropertyUnavailable

_DIGITS = re.compile(r"^[0-9]+$")


def parse_time_spec(spec: str) -> int:
    """
    Parse ``H:MM:SS``, ``MM:SS`` or bare seconds into whole seconds.

    Every field is read as a base-10 integer, so leading zeros ("08") are
    plain decimals. Minute and second fields are not range-checked.

    Args:
        spec: Clock string from the user

    Returns:
        Total seconds

    Raises:
        InvalidTimeFormat: On empty, signed, fractional or non-numeric fields,
            or more than three fields

    Example:
        parse_time_spec("01:15:00") -> 4500
        parse_time_spec("1:30") -> 90
    """
    if spec is None:
        raise InvalidTimeFormat("Empty time value")

    parts = spec.strip().split(":")
    if len(parts) > 3:
        raise InvalidTimeFormat(f"Invalid time '{spec}': expected [[H:]MM:]SS")

    for part in parts:
        if not _DIGITS.match(part):
            raise InvalidTimeFormat(f"Invalid time '{spec}': expected [[H:]MM:]SS")

    values = [int(part, 10) for part in parts]
    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds
    if len(values) == 2:
        minutes, seconds = values
        return minutes * 60 + seconds
    return values[0]


def format_seconds(seconds: float) -> str:
    """Format whole seconds as zero-padded ``HH:MM:SS``.

    Fractions are truncated. The hours field grows past two digits as needed.

    Raises:
        ValueError: If seconds is negative, NaN or infinite
    """
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise ValueError(f"Cannot format non-finite time: {seconds}")
    if seconds < 0:
        raise ValueError(f"Cannot format negative time: {seconds}")

    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def seconds_from_engine(value: Any, name: str = "time-pos") -> int:
    """Round an engine time value (float seconds) to whole seconds.

    Raises:
        PropertyUnavailable: If the value is missing, not a number,
            non-finite or negative
    """
    # bool is an int subclass; mpv sends false for "no value" on some properties
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PropertyUnavailable(name)
    if not math.isfinite(value) or value < 0:
        raise PropertyUnavailable(name, f"has invalid value {value!r}")
    return int(round(value))


__all__ = ["parse_time_spec", "format_seconds", "seconds_from_engine"]
