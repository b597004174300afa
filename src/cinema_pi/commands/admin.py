"""
Admin command handlers for Cinema Pi.

Handles: diag
"""

from pathlib import Path
from typing import List

from cinema_pi.context import AppContext
from cinema_pi.core.exceptions import MediaNotFound
from cinema_pi.domain import library
from cinema_pi.domain.playback import check_engine_available
from cinema_pi.result import CommandResult, Ok


def _mark(ok: bool) -> str:
    return "✓" if ok else "✗"


def handle_diag_command(ctx: AppContext, args: List[str]) -> CommandResult:
    """
    Report whether the pieces playback depends on are in place.

    Checks the engine executable, cec-client, the media directory and the
    control socket. Never fails; problems are reported in the output.
    """
    cfg = ctx.config
    engine_ok = check_engine_available(cfg.player.executable)
    cec_ok = ctx.sessions.display.is_available()

    films_dir = Path(cfg.media.films_dir).expanduser()
    try:
        media_count = len(library.list_media(cfg.media.films_dir, cfg.media.extensions))
        media_ok = True
    except MediaNotFound:
        media_count = 0
        media_ok = False

    live = ctx.sessions.is_live()

    lines = [
        "Cinema Pi Diagnostics:",
        f"  {_mark(engine_ok)} Player:        {cfg.player.executable}",
        f"  {_mark(cec_ok)} Display (CEC): {cfg.display.cec_client}"
        + ("" if cfg.display.enabled else " (disabled)"),
        f"  {_mark(media_ok)} Media dir:     {films_dir} ({media_count} movies)",
        f"  {_mark(live)} Playback:      "
        + (f"running on {cfg.player.socket_path}" if live else "not running"),
        f"    Bookmarks:     {cfg.marks_path}",
    ]
    return Ok(
        "\n".join(lines),
        {
            "engine_available": engine_ok,
            "cec_available": cec_ok,
            "media_dir_ok": media_ok,
            "media_count": media_count,
            "session_live": live,
        },
    )
