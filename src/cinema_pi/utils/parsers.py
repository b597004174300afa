"""
Argument parsing utilities.

Cross-cutting helpers that classify command arguments by shape, so a single
command name can multiplex several engine operations.
"""

import re
from typing import List, NamedTuple, Optional

from cinema_pi.core.exceptions import InvalidArgument
from cinema_pi.utils.timecode import parse_time_spec

DEFAULT_STEP_SECONDS = 10

_UNSIGNED = re.compile(r"^[0-9]+$")
_SIGNED = re.compile(r"^[+-][0-9]+$")


class TrackArg(NamedTuple):
    """Classified track-selection argument.

    kind is one of 'cycle', 'on', 'off', 'id'.
    """

    kind: str
    track_id: Optional[int] = None


class VolumeArg(NamedTuple):
    """Classified volume argument.

    kind is one of 'query', 'relative', 'absolute'.
    """

    kind: str
    value: int = 0


def first_arg(args: List[str]) -> Optional[str]:
    """Return the first argument, or None when absent."""
    return args[0] if args else None


def classify_track_arg(arg: Optional[str], allow_visibility: bool = False) -> TrackArg:
    """
    Classify a subs/audio argument.

    Args:
        arg: Raw argument, or None when omitted
        allow_visibility: Accept literal 'on'/'off' (subtitles only)

    Raises:
        InvalidArgument: If the argument matches no known shape
    """
    if arg is None or arg == "":
        return TrackArg("cycle")

    lowered = arg.strip().lower()
    if allow_visibility and lowered in ("on", "off"):
        return TrackArg(lowered)
    if _UNSIGNED.match(lowered):
        return TrackArg("id", int(lowered, 10))

    usage = "subs [on|off|number]" if allow_visibility else "audio [number]"
    raise InvalidArgument(f"Invalid track '{arg}'. Usage: {usage}")


def parse_volume_arg(arg: Optional[str]) -> VolumeArg:
    """
    Classify a volume argument: absent, signed delta or absolute level.

    Raises:
        InvalidArgument: If the argument is neither +N, -N nor N
    """
    if arg is None or arg == "":
        return VolumeArg("query")

    arg = arg.strip()
    if _SIGNED.match(arg):
        return VolumeArg("relative", int(arg, 10))
    if _UNSIGNED.match(arg):
        return VolumeArg("absolute", int(arg, 10))

    raise InvalidArgument(f"Invalid volume '{arg}'. Usage: volume [+N|-N|N]")


def parse_step_arg(arg: Optional[str], default: int = DEFAULT_STEP_SECONDS) -> int:
    """
    Parse a rewind/jump distance. Accepts seconds or a clock string.

    Raises:
        InvalidTimeFormat: If the argument is not a valid time
        InvalidArgument: If the distance is zero
    """
    if arg is None or arg == "":
        return default

    seconds = parse_time_spec(arg)
    if seconds <= 0:
        raise InvalidArgument(f"Step must be greater than zero, got '{arg}'")
    return seconds


__all__ = [
    "DEFAULT_STEP_SECONDS",
    "TrackArg",
    "VolumeArg",
    "first_arg",
    "classify_track_arg",
    "parse_volume_arg",
    "parse_step_arg",
]
