"""
Track and volume command handlers for Cinema Pi.

Handles: subs, audio, volume
"""

from typing import List

from cinema_pi.context import AppContext
from cinema_pi.core.exceptions import PropertyUnavailable
from cinema_pi.domain.playback import Session
from cinema_pi.result import CommandResult, Ok
from cinema_pi.utils import classify_track_arg, first_arg, parse_volume_arg


def handle_subs_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Cycle, show, hide or select a subtitle track.

    Args:
        ctx: Application context
        session: Live playback session
        args: [on|off|track number], empty to cycle
    """
    track = classify_track_arg(first_arg(args), allow_visibility=True)
    channel = session.channel

    if track.kind == "cycle":
        channel.run_action("cycle", "sub")
        return Ok("💬 Cycling subtitles", {"action": "cycle"})
    if track.kind == "on":
        channel.set_property("sub-visibility", True)
        return Ok("💬 Subtitles enabled", {"visible": True})
    if track.kind == "off":
        channel.set_property("sub-visibility", False)
        return Ok("💬 Subtitles disabled", {"visible": False})

    channel.set_property("sid", track.track_id)
    return Ok(f"💬 Subtitle track set to {track.track_id}", {"sid": track.track_id})


def handle_audio_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """Cycle audio tracks, or select one by number."""
    track = classify_track_arg(first_arg(args))

    if track.kind == "cycle":
        session.channel.run_action("cycle", "audio")
        return Ok("🔈 Cycling audio tracks", {"action": "cycle"})

    session.channel.set_property("aid", track.track_id)
    return Ok(f"🔈 Audio track set to {track.track_id}", {"aid": track.track_id})


def _volume_level(session: Session) -> int:
    value = session.channel.get_property("volume")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PropertyUnavailable("volume", f"unexpected value {value!r}")
    return int(round(value))


def handle_volume_command(ctx: AppContext, session: Session, args: List[str]) -> CommandResult:
    """
    Query, adjust or set the volume.

    'volume' reports the level, 'volume +5' / 'volume -5' adjust it and
    'volume 70' sets it. The engine enforces its own range.
    """
    volume = parse_volume_arg(first_arg(args))

    if volume.kind == "query":
        level = _volume_level(session)
        return Ok(f"🔊 Current volume: {level}%", {"volume": level})

    if volume.kind == "relative":
        session.channel.run_action("add", "volume", volume.value)
        sign = "+" if volume.value >= 0 else ""
        return Ok(f"🔊 Volume adjusted by {sign}{volume.value}", {"delta": volume.value})

    session.channel.set_property("volume", volume.value)
    return Ok(f"🔊 Volume set to {volume.value}%", {"volume": volume.value})
