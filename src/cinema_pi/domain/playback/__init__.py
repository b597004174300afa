"""Playback domain - mpv control socket and engine lifecycle.

This domain handles:
- mpv JSON IPC request/response exchanges
- The single engine session (start, stop, liveness)
- Display power signalling around playback
"""

from .display import DisplayPower
from .ipc import ControlChannel, Reply
from .session import (
    Session,
    SessionManager,
    build_engine_command,
    check_engine_available,
    resolve_media_path,
)

__all__ = [
    "ControlChannel",
    "DisplayPower",
    "Reply",
    "Session",
    "SessionManager",
    "build_engine_command",
    "check_engine_available",
    "resolve_media_path",
]
