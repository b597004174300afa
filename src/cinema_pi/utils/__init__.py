"""Cross-cutting utilities: time conversion and argument parsing."""

from .timecode import format_seconds, parse_time_spec, seconds_from_engine
from .parsers import (
    DEFAULT_STEP_SECONDS,
    TrackArg,
    VolumeArg,
    classify_track_arg,
    first_arg,
    parse_step_arg,
    parse_volume_arg,
)

__all__ = [
    "format_seconds",
    "parse_time_spec",
    "seconds_from_engine",
    "DEFAULT_STEP_SECONDS",
    "TrackArg",
    "VolumeArg",
    "classify_track_arg",
    "first_arg",
    "parse_step_arg",
    "parse_volume_arg",
]
