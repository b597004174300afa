"""
Command routing for Cinema Pi.

Routes user commands to handler functions and turns every failure into an
Error result, so a single bad command never takes the CLI down.
"""

from typing import List

from loguru import logger

from cinema_pi.context import AppContext
from cinema_pi.core.exceptions import CinemaError, NoActiveSession, UnknownCommand
from cinema_pi.result import CommandResult, Error, Ok

# Import command handlers
from cinema_pi.commands import admin
from cinema_pi.commands import bookmarks
from cinema_pi.commands import playback
from cinema_pi.commands import tracks

# Commands that talk to the running engine; rejected without any socket I/O
# beyond the liveness probe when nothing is playing.
SESSION_COMMANDS = frozenset(
    {
        "pause",
        "continue",
        "timing",
        "rewind",
        "jump",
        "mark",
        "goto",
        "marks",
        "unmark",
        "subs",
        "audio",
        "volume",
        "status",
        "loop",
    }
)

HELP_TEXT = """
Cinema Pi - Movie playback control

Playback:
  play [query]      Play a movie (pick from a list if no query)
  random            Play a random movie
  list              List available movies
  stop              Stop playback and put the display in standby
  pause             Toggle pause
  continue          Resume playback
  status            Show current movie and player status
  loop              Toggle looping of the current movie

Navigation:
  timing            Show current position and duration
  timing <time>     Jump to time ([[HH:]MM:]SS)
  rewind [n]        Go back n seconds (default 10, or MM:SS)
  jump [n]          Go forward n seconds (default 10, or MM:SS)

Bookmarks:
  mark [name]       Save current position (asks for a name if omitted)
  goto <name>       Jump to a saved bookmark
  marks             List bookmarks for the current movie
  unmark [name]     Delete a bookmark, or all bookmarks for the movie

Tracks:
  subs [on|off|#]   Cycle, show, hide or select subtitles
  audio [#]         Cycle or select audio track
  volume [+#|-#|#]  Show, adjust or set volume

Other:
  diag              Check player, display and media directory
  help              Show this help message
"""


def handle_help_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """Return the grouped command summary."""
    return Ok(HELP_TEXT.strip("\n"))


def _dispatch(ctx: AppContext, command: str, args: List[str]) -> CommandResult:
    if command in ("", "help"):
        return handle_help_command(ctx, args)

    elif command == "play":
        return playback.handle_play_command(ctx, args)

    elif command == "random":
        return playback.handle_random_command(ctx, args)

    elif command == "list":
        return playback.handle_list_command(ctx, args)

    elif command == "stop":
        return playback.handle_stop_command(ctx, args)

    elif command in ("diag", "diagnostic"):
        return admin.handle_diag_command(ctx, args)

    if command not in SESSION_COMMANDS:
        raise UnknownCommand(command)

    session = ctx.sessions.current()
    if session is None:
        raise NoActiveSession()

    if command == "pause":
        return playback.handle_pause_command(ctx, session, args)

    elif command == "continue":
        return playback.handle_continue_command(ctx, session, args)

    elif command == "timing":
        return playback.handle_timing_command(ctx, session, args)

    elif command == "rewind":
        return playback.handle_rewind_command(ctx, session, args)

    elif command == "jump":
        return playback.handle_jump_command(ctx, session, args)

    elif command == "status":
        return playback.handle_status_command(ctx, session, args)

    elif command == "loop":
        return playback.handle_loop_command(ctx, session, args)

    elif command == "mark":
        return bookmarks.handle_mark_command(ctx, session, args)

    elif command == "goto":
        return bookmarks.handle_goto_command(ctx, session, args)

    elif command == "marks":
        return bookmarks.handle_marks_command(ctx, session, args)

    elif command == "unmark":
        return bookmarks.handle_unmark_command(ctx, session, args)

    elif command == "subs":
        return tracks.handle_subs_command(ctx, session, args)

    elif command == "audio":
        return tracks.handle_audio_command(ctx, session, args)

    # volume
    return tracks.handle_volume_command(ctx, session, args)


def handle_command(ctx: AppContext, command: str, args: List[str]) -> CommandResult:
    """
    Handle a single command.

    Args:
        ctx: Application context
        command: Command name (case-insensitive)
        args: Command arguments

    Returns:
        Ok, Error or NeedsInput; never raises
    """
    command = command.strip().lower()
    logger.debug(f"Dispatching '{command}' args={args}")

    try:
        return _dispatch(ctx, command, args)
    except CinemaError as e:
        logger.warning(f"{command or 'help'} failed [{e.code}]: {e}")
        return Error.from_exception(e)
    except Exception as e:
        logger.exception(f"Unexpected error running '{command}'")
        return Error("internal_error", f"Unexpected error: {e}")
