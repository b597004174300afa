"""
Persistent bookmark store backed by a flat line file.

One record per line: ``media_path|name|offset_seconds``. Records are only ever
appended or removed; a re-mark under an existing name appends, and lookups
return the most recently appended match.

Concurrent CLI invocations coordinate through ``flock`` on a sibling lock
file: writers hold it exclusively for the whole read-modify-write, readers
hold it shared. The lock lives beside the data file rather than on it because
deletes swap the data file's inode with ``os.replace``.
"""

import fcntl
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from loguru import logger

from cinema_pi.core.exceptions import BookmarkNotFound
from cinema_pi.domain.bookmarks.models import (
    Bookmark,
    validate_field,
    validate_offset,
)


class BookmarkStore:
    """File-backed bookmark index shared by independent command invocations."""

    def __init__(self, marks_file: Path):
        """
        Initialize store.

        Args:
            marks_file: Path of the bookmark file (created on first add)
        """
        self.marks_file = Path(marks_file)
        self.lock_file = self.marks_file.with_name(self.marks_file.name + ".lock")

    @contextmanager
    def _lock(self, exclusive: bool) -> Iterator[None]:
        """Hold an flock on the lock file for the duration of the block."""
        self.marks_file.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.lock_file), os.O_CREAT | os.O_RDWR, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)

    def _read_lines(self) -> List[str]:
        """Read raw lines (assumes lock is held)."""
        try:
            with open(self.marks_file, "r", encoding="utf-8", errors="surrogateescape") as f:
                return f.readlines()
        except FileNotFoundError:
            return []

    def _missing_final_newline(self) -> bool:
        """Whether the last line was left unterminated, e.g. by a hand edit."""
        try:
            with open(self.marks_file, "rb") as f:
                f.seek(0, os.SEEK_END)
                if f.tell() == 0:
                    return False
                f.seek(-1, os.SEEK_END)
                return f.read(1) != b"\n"
        except FileNotFoundError:
            return False

    def _read_records(self) -> List[Bookmark]:
        """Decode all well-formed records (assumes lock is held)."""
        records = []
        for lineno, line in enumerate(self._read_lines(), start=1):
            if not line.strip():
                continue
            bookmark = Bookmark.from_line(line)
            if bookmark is None:
                logger.warning(f"Skipping malformed bookmark line {lineno} in {self.marks_file}")
                continue
            records.append(bookmark)
        return records

    def _write_lines(self, lines: List[str]) -> None:
        """Replace the bookmark file atomically (assumes exclusive lock is held)."""
        fd, temp_path = tempfile.mkstemp(
            prefix=f".{self.marks_file.name}.", suffix=".tmp", dir=self.marks_file.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as f:
                f.writelines(lines)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.marks_file)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    def exists(self) -> bool:
        """Whether any bookmark has ever been saved (file present)."""
        return self.marks_file.exists()

    def add(self, media_path: str, name: str, offset_seconds: int) -> Bookmark:
        """
        Append one bookmark record.

        Duplicate keys are allowed; the newest record wins on lookup.

        Raises:
            InvalidArgument: If a field is empty, contains a delimiter or
                newline, or the offset is not a non-negative integer
        """
        bookmark = Bookmark(
            media_path=validate_field(media_path, "path"),
            name=validate_field(name.strip() if isinstance(name, str) else name, "name"),
            offset_seconds=validate_offset(offset_seconds),
        )

        with self._lock(exclusive=True):
            prefix = "\n" if self._missing_final_newline() else ""
            with open(self.marks_file, "a", encoding="utf-8") as f:
                f.write(prefix + bookmark.to_line() + "\n")
                f.flush()
                os.fsync(f.fileno())

        logger.info(
            f"Bookmark added: '{bookmark.name}' at {bookmark.offset_seconds}s for {bookmark.media_path}"
        )
        return bookmark

    def find(self, media_path: str, name: str) -> Bookmark:
        """
        Return the most recently appended bookmark for (media_path, name).

        Raises:
            BookmarkNotFound: If no record matches both keys
        """
        name = name.strip()
        with self._lock(exclusive=False):
            records = self._read_records()

        match = None
        for bookmark in records:
            if bookmark.media_path == media_path and bookmark.name == name:
                match = bookmark
        if match is None:
            raise BookmarkNotFound(name, media_path)
        return match

    def list(self, media_path: str) -> List[Bookmark]:
        """All bookmarks for media_path in insertion order, duplicates included."""
        with self._lock(exclusive=False):
            records = self._read_records()
        return [b for b in records if b.media_path == media_path]

    def delete(self, media_path: str, name: Optional[str] = None) -> int:
        """
        Remove bookmarks for media_path, or only those named name.

        Malformed lines belonging to nobody are preserved.

        Returns:
            Number of records removed
        """
        if name is not None:
            name = name.strip()

        with self._lock(exclusive=True):
            lines = self._read_lines()
            kept = []
            removed = 0
            for line in lines:
                bookmark = Bookmark.from_line(line) if line.strip() else None
                if (
                    bookmark is not None
                    and bookmark.media_path == media_path
                    and (name is None or bookmark.name == name)
                ):
                    removed += 1
                    continue
                kept.append(line if line.endswith("\n") else line + "\n")

            if removed:
                self._write_lines(kept)

        logger.info(
            f"Deleted {removed} bookmark(s) for {media_path}"
            + (f" named '{name}'" if name is not None else "")
        )
        return removed
