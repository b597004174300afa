"""
Bookmark domain models.

Contains the record type and its line encoding for the bookmark file.
"""

from dataclasses import dataclass
from typing import Optional

from cinema_pi.core.exceptions import InvalidArgument
from cinema_pi.utils.timecode import format_seconds

FIELD_DELIMITER = "|"

# Characters that would split or terminate a record
FORBIDDEN_CHARS = (FIELD_DELIMITER, "\n", "\r", "\x00")


@dataclass(frozen=True)
class Bookmark:
    """A named time offset scoped to one media file.

    media_path is the fully resolved path reported by the engine; it is the
    join key, so identically named files in different folders never collide.
    """

    media_path: str
    name: str
    offset_seconds: int

    @property
    def display_time(self) -> str:
        return format_seconds(self.offset_seconds)

    def to_line(self) -> str:
        """Encode as one bookmark file line (without trailing newline)."""
        return FIELD_DELIMITER.join((self.media_path, self.name, str(self.offset_seconds)))

    @classmethod
    def from_line(cls, line: str) -> Optional["Bookmark"]:
        """Decode one bookmark file line.

        Returns:
            Bookmark, or None if the line is malformed
        """
        parts = line.rstrip("\r\n").split(FIELD_DELIMITER)
        if len(parts) != 3:
            return None
        media_path, name, offset = parts
        if not media_path or not name or not offset.isdigit():
            return None
        return cls(media_path=media_path, name=name, offset_seconds=int(offset, 10))


def validate_field(value: str, label: str) -> str:
    """Reject values that cannot be stored without corrupting records.

    Raises:
        InvalidArgument: If value is empty or contains a forbidden character
    """
    if not isinstance(value, str) or not value:
        raise InvalidArgument(f"Bookmark {label} cannot be empty")
    for char in FORBIDDEN_CHARS:
        if char in value:
            shown = {"\n": "newline", "\r": "carriage return", "\x00": "NUL"}.get(char, f"'{char}'")
            raise InvalidArgument(f"Bookmark {label} cannot contain {shown}")
    return value


def validate_offset(offset: int) -> int:
    """Raises InvalidArgument unless offset is a non-negative integer."""
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise InvalidArgument(f"Bookmark offset must be a non-negative integer, got {offset!r}")
    return offset
