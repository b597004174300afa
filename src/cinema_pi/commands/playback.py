"""
Playback command handlers for Cinema Pi.

Handles: play, random, list, stop, pause, continue, timing, rewind, jump,
status, loop
"""

import os
from pathlib import Path
from typing import Any, List, Optional

from cinema_pi.context import AppContext
from cinema_pi.core.exceptions import MediaNotFound, PropertyUnavailable
from cinema_pi.domain import library
from cinema_pi.domain.playback import ControlChannel, Session
from cinema_pi.result import CommandResult, NeedsInput, Ok
from cinema_pi.utils import (
    first_arg,
    format_seconds,
    parse_step_arg,
    parse_time_spec,
    seconds_from_engine,
)

UNAVAILABLE = "unavailable"


def _start(ctx: AppContext, path: Path) -> CommandResult:
    session = ctx.sessions.start(str(path))
    return Ok(
        f"▶ Playing: {path.name} (use 'stop' to quit)",
        {"path": str(path.expanduser().resolve()), "pid": session.pid},
    )


def _library_files(ctx: AppContext) -> List[Path]:
    return library.list_media(ctx.config.media.films_dir, ctx.config.media.extensions)


def handle_play_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """
    Play a movie by path, title or search query.

    With no query the caller is asked to pick a title from the library.

    Args:
        ctx: Application context
        args: Query words (joined with spaces)

    Returns:
        Ok with the resolved path, or NeedsInput listing the titles
    """
    query = " ".join(args).strip()

    if not query:
        files = _library_files(ctx)
        if not files:
            raise MediaNotFound(f"No movies in {ctx.config.media.films_dir}")
        return NeedsInput(
            field="query",
            prompt="Select a movie",
            choices=[library.display_name(p) for p in files],
        )

    candidate = Path(query).expanduser()
    if os.sep in query and candidate.is_file():
        return _start(ctx, candidate)

    files = _library_files(ctx)
    exact = library.find_by_display_name(files, query)
    if exact is not None:
        return _start(ctx, exact)

    return _start(
        ctx,
        library.search_media(ctx.config.media.films_dir, ctx.config.media.extensions, query),
    )


def handle_random_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """Play a random movie from the library."""
    path = library.pick_random(ctx.config.media.films_dir, ctx.config.media.extensions)
    return _start(ctx, path)


def handle_list_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """List library titles without extensions."""
    titles = [library.display_name(p) for p in _library_files(ctx)]
    if not titles:
        return Ok(f"No movies found in {ctx.config.media.films_dir}", {"movies": []})
    return Ok("\n".join(titles), {"movies": titles})


def handle_stop_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """Stop playback and send the display to standby."""
    was_running = ctx.sessions.stop()
    if was_running:
        return Ok("⏹ Playback stopped - display standby", {"stopped": True})
    return Ok("⏹ Nothing was playing - display standby", {"stopped": False})


def _try_property(channel: ControlChannel, name: str) -> Any:
    """Read a property, None when the engine has no value for it."""
    try:
        return channel.get_property(name)
    except PropertyUnavailable:
        return None


def _try_seconds(channel: ControlChannel, name: str) -> Optional[int]:
    try:
        return seconds_from_engine(channel.get_property(name), name)
    except PropertyUnavailable:
        return None


def handle_pause_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Toggle pause and report the resulting state."""
    session.channel.run_action("cycle", "pause")
    paused = _try_property(session.channel, "pause")
    if paused is True:
        return Ok("⏸ Paused", {"paused": True})
    if paused is False:
        return Ok("▶ Resumed", {"paused": False})
    return Ok("⏯ Paused/Resumed", {"paused": None})


def handle_continue_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Resume playback unconditionally."""
    session.channel.set_property("pause", False)
    return Ok("▶ Resuming playback", {"paused": False})


def handle_timing_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Without argument report position/duration; with a clock string seek there.

    Raises:
        InvalidTimeFormat: If the argument is not [[H:]MM:]SS
        PropertyUnavailable: If position or duration cannot be read
    """
    spec = first_arg(args)
    if spec:
        seconds = parse_time_spec(spec)
        session.channel.run_action("seek", seconds, "absolute")
        return Ok(f"⏩ Jumped to {format_seconds(seconds)}", {"position": seconds})

    position = seconds_from_engine(session.channel.get_property("time-pos"), "time-pos")
    duration = seconds_from_engine(session.channel.get_property("duration"), "duration")
    return Ok(
        f"⏱ Position: {format_seconds(position)} / {format_seconds(duration)}",
        {"position": position, "duration": duration},
    )


def handle_rewind_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Seek backwards by N seconds (default 10)."""
    step = parse_step_arg(first_arg(args))
    session.channel.run_action("seek", -step, "relative")
    return Ok(f"⏪ Rewinding by {step}s", {"offset": -step})


def handle_jump_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Seek forwards by N seconds (default 10)."""
    step = parse_step_arg(first_arg(args))
    session.channel.run_action("seek", step, "relative")
    return Ok(f"⏩ Jumping forward by {step}s", {"offset": step})


def _track_label(value: Any) -> str:
    if value is None:
        return UNAVAILABLE
    if value is False or value == "no":
        return "off"
    return str(value)


def handle_status_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Aggregate filename, pause state, position, duration and track ids.

    Each value is queried on its own; one that the engine cannot provide is
    shown as 'unavailable' instead of failing the whole report.
    """
    channel = session.channel
    filename = _try_property(channel, "filename")
    paused = _try_property(channel, "pause")
    position = _try_seconds(channel, "time-pos")
    duration = _try_seconds(channel, "duration")
    audio_id = _try_property(channel, "aid")
    sub_id = _try_property(channel, "sid")

    if paused is True:
        state = "Paused"
    elif paused is False:
        state = "Playing"
    else:
        state = UNAVAILABLE

    position_text = format_seconds(position) if position is not None else UNAVAILABLE
    duration_text = format_seconds(duration) if duration is not None else UNAVAILABLE

    lines = [
        "Playback Status:",
        f"  Movie:       {os.path.basename(filename) if isinstance(filename, str) else UNAVAILABLE}",
        f"  Status:      {state}",
        f"  Timing:      {position_text} / {duration_text}",
        f"  Audio ID:    {_track_label(audio_id)}",
        f"  Subtitle ID: {_track_label(sub_id)}",
    ]
    return Ok(
        "\n".join(lines),
        {
            "filename": filename,
            "paused": paused,
            "position": position,
            "duration": duration,
            "aid": audio_id,
            "sid": sub_id,
        },
    )


def handle_loop_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Toggle file looping and report the resulting state."""
    session.channel.run_action("cycle", "loop-file")
    state = session.channel.get_property("loop-file")
    enabled = state not in ("no", False, 0)
    if enabled:
        return Ok("🔁 File looping enabled", {"loop": True, "loop_file": state})
    return Ok("➡ File looping disabled", {"loop": False, "loop_file": state})
