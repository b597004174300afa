"""
Configuration management for Cinema Pi
"""

import os
import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


DEFAULT_MPV_ARGS = [
    "--fs",
    "--vo=gpu",
    "--gpu-api=opengl",
    "--gpu-dumb-mode=yes",
    "--drm-connector=HDMI-A-1",
    "--hwdec=drm-copy",
    "--ao=alsa",
    "--cache=yes",
    "--cache-secs=300",
    "--demuxer-max-bytes=2048M",
    "--demuxer-readahead-secs=180",
    "--stream-buffer-size=16M",
    "--hr-seek=yes",
    "--hr-seek-framedrop=no",
    "--audio-buffer=1.0",
    "--opengl-glfinish=yes",
    "--really-quiet",
    "--no-terminal",
    "--no-input-default-bindings",
]


@dataclass
class MediaConfig:
    """Configuration for the media library."""

    films_dir: str = "/mnt/MediaDrive/Movies"
    extensions: List[str] = field(default_factory=lambda: [".mp4", ".mkv"])


@dataclass
class PlayerConfig:
    """Configuration for the mpv engine."""

    executable: str = "mpv"
    socket_path: str = "/tmp/mpv-socket"
    mpv_args: List[str] = field(default_factory=lambda: list(DEFAULT_MPV_ARGS))
    launch_timeout: float = 5.0  # Seconds to wait for the control socket
    stop_grace: float = 2.0  # Seconds between graceful and forced termination

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not self.executable:
            raise ValueError("player.executable must not be empty")
        if not self.socket_path:
            raise ValueError("player.socket_path must not be empty")
        if self.launch_timeout <= 0:
            raise ValueError(f"player.launch_timeout must be positive, got {self.launch_timeout}")
        if self.stop_grace < 0:
            raise ValueError(f"player.stop_grace must not be negative, got {self.stop_grace}")


@dataclass
class DisplayConfig:
    """Configuration for HDMI-CEC display power signalling."""

    enabled: bool = True
    cec_client: str = "cec-client"
    device: int = 0  # CEC logical address of the TV
    wake_delay: float = 5.0  # Seconds to let the display wake before launch


@dataclass
class BookmarksConfig:
    """Configuration for bookmark storage."""

    marks_file: Optional[str] = None  # Default: <data_dir>/marks.txt


@dataclass
class IPCConfig:
    """Configuration for the engine control channel."""

    timeout: float = 2.0  # Seconds per request round trip

    def validate(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"ipc.timeout must be positive, got {self.timeout}")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # Default: ~/.local/share/cinema-pi/cinema.log
    max_file_size_mb: int = 10  # Maximum log file size before rotation
    backup_count: int = 5  # Number of backup files to keep
    console_output: bool = False  # Also output to stderr (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    media: MediaConfig = field(default_factory=MediaConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    bookmarks: BookmarksConfig = field(default_factory=BookmarksConfig)
    ipc: IPCConfig = field(default_factory=IPCConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def marks_path(self) -> Path:
        if self.bookmarks.marks_file:
            return Path(self.bookmarks.marks_file).expanduser()
        return get_data_dir() / "marks.txt"

    @property
    def pid_path(self) -> Path:
        return get_data_dir() / "engine.pid"

    @property
    def log_path(self) -> Path:
        if self.logging.log_file:
            return Path(self.logging.log_file).expanduser()
        return get_data_dir() / "cinema.log"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "cinema-pi"
    return Path.home() / ".config" / "cinema-pi"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            # Found project root but no config.toml there
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/cinema-pi (or ~/.config/cinema-pi)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path (bookmarks, pid file, logs)."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "cinema-pi"
    return Path.home() / ".local" / "share" / "cinema-pi"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    mpv_args = ",\n".join(f'    "{arg}"' for arg in DEFAULT_MPV_ARGS)
    return f"""
# Cinema Pi Configuration

[media]
# Directory holding the movies (FILMS_DIR overrides this)
films_dir = "/mnt/MediaDrive/Movies"

# File extensions listed by play/random/list
extensions = [".mp4", ".mkv"]

[player]
# mpv executable
executable = "mpv"

# Fixed control socket; every command talks to the engine through it
socket_path = "/tmp/mpv-socket"

# Extra mpv flags (decoder, output and cache tuning)
mpv_args = [
{mpv_args},
]

# Seconds to wait for the control socket after launch
launch_timeout = 5.0

# Seconds between graceful and forced termination on stop
stop_grace = 2.0

[display]
# Turn the TV on/off over HDMI-CEC
enabled = true
cec_client = "cec-client"
device = 0

# Seconds to let the TV wake up before playback starts
wake_delay = 5.0

[bookmarks]
# Custom bookmark file (default: ~/.local/share/cinema-pi/marks.txt)
# marks_file = "~/.cinema_pi/marks.txt"

[ipc]
# Seconds to wait for each engine reply
timeout = 2.0

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/cinema-pi/cinema.log)
# log_file = "/path/to/cinema.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of backup log files to keep
backup_count = 5

# Also output logs to stderr (useful for debugging)
console_output = false
""".strip()


def _apply_env_overrides(config: Config) -> None:
    films_dir = os.environ.get("CINEMA_FILMS_DIR") or os.environ.get("FILMS_DIR")
    if films_dir:
        config.media.films_dir = str(Path(films_dir).expanduser())

    socket_path = os.environ.get("CINEMA_SOCKET_PATH")
    if socket_path:
        config.player.socket_path = socket_path


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - FILMS_DIR / CINEMA_FILMS_DIR
    - CINEMA_SOCKET_PATH
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            print(f"Created default configuration at: {config_path}", file=sys.stderr)
        except OSError as e:
            print(f"Could not write default configuration to {config_path}: {e}", file=sys.stderr)
        config = Config()
        _apply_env_overrides(config)
        return config

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)
        config = Config()
        _apply_env_overrides(config)
        return config

    config = Config()

    if "media" in toml_data:
        media_data = toml_data["media"]
        config.media = MediaConfig(
            films_dir=str(
                Path(media_data.get("films_dir", config.media.films_dir)).expanduser()
            ),
            extensions=[
                ext.lower() for ext in media_data.get("extensions", config.media.extensions)
            ],
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        try:
            config.player = PlayerConfig(
                executable=player_data.get("executable", config.player.executable),
                socket_path=player_data.get("socket_path", config.player.socket_path),
                mpv_args=list(player_data.get("mpv_args", config.player.mpv_args)),
                launch_timeout=float(
                    player_data.get("launch_timeout", config.player.launch_timeout)
                ),
                stop_grace=float(player_data.get("stop_grace", config.player.stop_grace)),
            )
            config.player.validate()
        except (TypeError, ValueError) as e:
            print(f"Warning: Invalid player configuration: {e}", file=sys.stderr)
            print("Using default player configuration.", file=sys.stderr)
            config.player = PlayerConfig()

    if "display" in toml_data:
        display_data = toml_data["display"]
        try:
            config.display = DisplayConfig(
                enabled=display_data.get("enabled", config.display.enabled),
                cec_client=display_data.get("cec_client", config.display.cec_client),
                device=int(display_data.get("device", config.display.device)),
                wake_delay=max(
                    0.0, float(display_data.get("wake_delay", config.display.wake_delay))
                ),
            )
        except (TypeError, ValueError) as e:
            print(f"Warning: Invalid display configuration: {e}", file=sys.stderr)
            print("Using default display configuration.", file=sys.stderr)
            config.display = DisplayConfig()

    if "bookmarks" in toml_data:
        config.bookmarks = BookmarksConfig(
            marks_file=toml_data["bookmarks"].get("marks_file"),
        )

    if "ipc" in toml_data:
        try:
            config.ipc = IPCConfig(
                timeout=float(toml_data["ipc"].get("timeout", config.ipc.timeout)),
            )
            config.ipc.validate()
        except (TypeError, ValueError) as e:
            print(f"Warning: Invalid ipc configuration: {e}", file=sys.stderr)
            print("Using default ipc configuration.", file=sys.stderr)
            config.ipc = IPCConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    _apply_env_overrides(config)
    return config


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
