"""Error taxonomy for Cinema Pi.

Every failure carries a machine-readable ``code`` so the dispatcher can turn it
into an ``Error`` result without inspecting message text.
"""


class CinemaError(Exception):
    """Base exception for Cinema Pi operations."""

    code = "error"


class EngineUnreachable(CinemaError):
    """Raised when the control socket is missing or refuses connections."""

    code = "engine_unreachable"


class EngineTimeout(EngineUnreachable):
    """Raised when the engine does not answer within the request timeout."""

    code = "engine_timeout"


class EngineProtocolError(CinemaError):
    """Raised when a reply is not a well-formed mpv JSON envelope."""

    code = "engine_protocol"


class EngineCommandFailed(CinemaError):
    """Raised when the engine answers a command with an error."""

    code = "engine_error"

    def __init__(self, command: str, error: str):
        self.command = command
        self.error = error
        super().__init__(f"Engine rejected '{command}': {error}")


class EngineLaunchFailed(CinemaError):
    """Raised when the engine executable cannot be started."""

    code = "engine_launch_failed"


class PropertyUnavailable(CinemaError):
    """Raised when a property has no value in the engine's current state."""

    code = "property_unavailable"

    def __init__(self, name: str, reason: str = "unavailable"):
        self.name = name
        self.reason = reason
        super().__init__(f"Property '{name}' {reason}")


class InvalidArgument(CinemaError):
    """Raised when user input is malformed."""

    code = "invalid_argument"


class InvalidTimeFormat(InvalidArgument):
    """Raised when a clock string cannot be parsed."""

    code = "invalid_time_format"


class BookmarkNotFound(CinemaError):
    """Raised when no bookmark matches a (media path, name) key."""

    code = "bookmark_not_found"

    def __init__(self, name: str, media_path: str = ""):
        self.name = name
        self.media_path = media_path
        super().__init__(f"Bookmark '{name}' not found for this movie")


class MediaNotFound(CinemaError):
    """Raised when a media path or query does not resolve to a file."""

    code = "media_not_found"


class NoActiveSession(CinemaError):
    """Raised when a command needs a running engine and none is live."""

    code = "no_active_session"

    def __init__(self, message: str = "No playback currently running"):
        super().__init__(message)


class UnknownCommand(CinemaError):
    """Raised when a command name has no handler."""

    code = "unknown_command"

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command: '{command}'. Type 'help' for available commands.")
