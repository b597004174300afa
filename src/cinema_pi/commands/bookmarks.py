"""
Bookmark command handlers for Cinema Pi.

Handles: mark, goto, marks, unmark

Bookmarks are keyed by the full path the engine reports for the current
file, so they survive restarts and never leak between movies.
"""

import os
from typing import List

from loguru import logger

from cinema_pi.context import AppContext
from cinema_pi.core.exceptions import BookmarkNotFound, InvalidArgument, PropertyUnavailable
from cinema_pi.domain.playback import Session
from cinema_pi.result import CommandResult, NeedsInput, Ok
from cinema_pi.utils import format_seconds, seconds_from_engine


def _bookmark_name(args: List[str]) -> str:
    return " ".join(args).strip()


def _current_path(session: Session) -> str:
    """Full path of the playing file as reported by the engine."""
    value = session.channel.get_property("path")
    if not isinstance(value, str) or not value:
        raise PropertyUnavailable("path")
    return value


def handle_mark_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Save the current position under a name.

    Args:
        ctx: Application context
        session: Live playback session
        args: Bookmark name (words joined with spaces)

    Returns:
        Ok with the stored record, or NeedsInput when no name was given
    """
    name = _bookmark_name(args)
    if not name:
        return NeedsInput(field="name", prompt="Bookmark name")

    position = seconds_from_engine(session.channel.get_property("time-pos"), "time-pos")
    media_path = _current_path(session)

    bookmark = ctx.bookmarks.add(media_path, name, position)
    return Ok(
        f"✓ Bookmark '{bookmark.name}' created at {bookmark.display_time} "
        f"for '{os.path.basename(media_path)}'",
        {
            "name": bookmark.name,
            "offset": bookmark.offset_seconds,
            "media_path": bookmark.media_path,
        },
    )


def handle_goto_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Seek to a saved bookmark of the current movie.

    Raises:
        InvalidArgument: If no name was given
        BookmarkNotFound: If the movie has no bookmark with that name
    """
    name = _bookmark_name(args)
    if not name:
        raise InvalidArgument("Usage: goto <bookmark_name>")

    media_path = _current_path(session)
    bookmark = ctx.bookmarks.find(media_path, name)

    session.channel.run_action("seek", bookmark.offset_seconds, "absolute")
    logger.info(f"Jumped to bookmark '{bookmark.name}' at {bookmark.offset_seconds}s")
    return Ok(
        f"⏩ Jumped to bookmark '{bookmark.name}' ({bookmark.display_time})",
        {"name": bookmark.name, "offset": bookmark.offset_seconds},
    )


def handle_marks_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """List bookmarks of the current movie in the order they were saved."""
    media_path = _current_path(session)
    title = os.path.basename(media_path)

    if not ctx.bookmarks.exists():
        return Ok("No bookmarks saved yet", {"bookmarks": [], "store_exists": False})

    bookmarks = ctx.bookmarks.list(media_path)
    if not bookmarks:
        return Ok(f"No bookmarks found for '{title}'", {"bookmarks": [], "store_exists": True})

    lines = [f"Bookmarks for '{title}':"]
    lines.extend(f"  {b.name} - {b.display_time}" for b in bookmarks)
    return Ok(
        "\n".join(lines),
        {
            "bookmarks": [{"name": b.name, "offset": b.offset_seconds} for b in bookmarks],
            "store_exists": True,
        },
    )


def handle_unmark_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Delete one bookmark by name, or all bookmarks of the current movie.

    Raises:
        BookmarkNotFound: If a name was given and nothing matched
    """
    name = _bookmark_name(args)
    media_path = _current_path(session)
    title = os.path.basename(media_path)

    if name:
        removed = ctx.bookmarks.delete(media_path, name) if ctx.bookmarks.exists() else 0
        if removed == 0:
            raise BookmarkNotFound(name, media_path)
        return Ok(f"✓ Bookmark '{name}' deleted", {"removed": removed})

    if not ctx.bookmarks.exists():
        return Ok("No bookmarks saved yet", {"removed": 0})

    removed = ctx.bookmarks.delete(media_path)
    if removed == 0:
        return Ok(f"No bookmarks found for '{title}'", {"removed": 0})
    return Ok(f"✓ Deleted {removed} bookmark(s) for '{title}'", {"removed": removed})
