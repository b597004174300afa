"""
Playback session lifecycle for Cinema Pi.

Exactly one engine runs at a time. The control socket path is fixed, and
its connectability is the only liveness signal: a Session exists iff the
socket accepts connections. Processes are launched detached so the engine
outlives the command that started it; its pid is recorded so a later
invocation can stop it.
"""

import os
import subprocess
import time
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional

import psutil
from loguru import logger

from cinema_pi.core.config import Config
from cinema_pi.core.exceptions import (
    CinemaError,
    EngineLaunchFailed,
    EngineUnreachable,
    MediaNotFound,
)
from cinema_pi.domain.playback.display import DisplayPower
from cinema_pi.domain.playback.ipc import ControlChannel

# Poll interval while waiting for the socket to appear or disappear
POLL_INTERVAL = 0.1


class Session(NamedTuple):
    """Handle to the live engine.

    The media being played is never cached here; ask the engine
    (get_property "path") since it is the source of truth.
    """

    socket_path: str
    channel: ControlChannel
    pid: Optional[int] = None


def check_engine_available(executable: str = "mpv") -> bool:
    """Check if the engine executable is available on the system."""
    try:
        result = subprocess.run(
            [executable, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def resolve_media_path(media_path: str) -> Path:
    """Resolve to an absolute path of an existing regular file.

    Raises:
        MediaNotFound: If the path does not name a regular file
    """
    resolved = Path(media_path).expanduser().resolve()
    if not resolved.is_file():
        raise MediaNotFound(f"File not found: {resolved}")
    return resolved


def build_engine_command(config: Config, media_path: Path) -> List[str]:
    """Build the engine argv; the full path is required so bookmarks match."""
    return [
        config.player.executable,
        *config.player.mpv_args,
        f"--input-ipc-server={config.player.socket_path}",
        str(media_path),
    ]


class SessionManager:
    """Owns the single playback engine: start, stop and liveness."""

    def __init__(self, config: Config, display: Optional[DisplayPower] = None):
        self.config = config
        self.display = display or DisplayPower(config.display)
        self.socket_path = config.player.socket_path
        self.pid_path = config.pid_path
        self.channel = ControlChannel(self.socket_path, timeout=config.ipc.timeout)

    # --- liveness -----------------------------------------------------

    def is_live(self) -> bool:
        """True iff the control socket is currently connectable."""
        return self.channel.is_connectable()

    def current(self) -> Optional[Session]:
        """Return a handle to the live session, or None when idle."""
        if not self.is_live():
            return None
        return Session(socket_path=self.socket_path, channel=self.channel, pid=self._read_pid())

    # --- pid bookkeeping ------------------------------------------------

    def _read_pid(self) -> Optional[int]:
        try:
            return int(self.pid_path.read_text().strip())
        except (OSError, ValueError):
            return None

    def _write_pid(self, pid: int) -> None:
        try:
            self.pid_path.parent.mkdir(parents=True, exist_ok=True)
            self.pid_path.write_text(f"{pid}\n")
        except OSError as e:
            logger.warning(f"Could not record engine pid {pid}: {e}")

    def _clear_pid(self) -> None:
        try:
            self.pid_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove pid file {self.pid_path}: {e}")

    def _owned_process(self, pid: int) -> Optional[psutil.Process]:
        """Return the process for pid only if it is our engine.

        A recycled pid belonging to something else is never signalled.
        """
        try:
            process = psutil.Process(pid)
            cmdline = process.cmdline()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return None

        if not any(self.socket_path in arg for arg in cmdline):
            logger.warning(f"Recorded pid {pid} is not the engine; ignoring it")
            return None
        return process

    def _remove_stale_socket(self) -> None:
        if os.path.exists(self.socket_path) and not self.channel.is_connectable():
            try:
                os.unlink(self.socket_path)
                logger.debug(f"Removed stale socket: {self.socket_path}")
            except OSError as e:
                logger.warning(f"Could not remove stale socket {self.socket_path}: {e}")

    def _best_effort(self, action: Callable[[], bool], label: str) -> None:
        """Run a display power action; its failure never affects playback."""
        try:
            action()
        except Exception as e:
            logger.warning(f"Display {label} failed: {e}")

    # --- lifecycle ------------------------------------------------------

    def _terminate(self, process: psutil.Process) -> None:
        """Graceful termination, then forced kill after the grace period."""
        grace = self.config.player.stop_grace
        try:
            logger.info(f"Terminating engine pid={process.pid}")
            process.terminate()
            try:
                process.wait(timeout=grace)
                return
            except psutil.TimeoutExpired:
                logger.warning(f"Engine pid={process.pid} ignored SIGTERM for {grace}s; killing")
            process.kill()
            process.wait(timeout=max(grace, 1.0))
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as e:
            logger.error(f"Not allowed to signal engine pid={process.pid}: {e}")
        except psutil.TimeoutExpired:
            logger.error(f"Engine pid={process.pid} did not exit after SIGKILL")

    def _wait_for_socket_gone(self, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if not self.channel.is_connectable():
                return True
            time.sleep(POLL_INTERVAL)
        return not self.channel.is_connectable()

    def stop(self, power_off: bool = True) -> bool:
        """
        Stop the engine if one is running. Idempotent.

        Args:
            power_off: Also send the display to standby

        Returns:
            True if an engine was running
        """
        was_running = False

        pid = self._read_pid()
        process = self._owned_process(pid) if pid is not None else None
        if process is not None:
            was_running = True
            self._terminate(process)
        elif self.channel.is_connectable():
            # Engine started outside this installation: ask it to quit
            was_running = True
            logger.info("No recorded engine pid; sending quit over the control socket")
            try:
                self.channel.run_action("quit")
            except CinemaError as e:
                # mpv may close the socket before acknowledging quit
                logger.debug(f"quit: {e}")
            if not self._wait_for_socket_gone(self.config.player.stop_grace):
                logger.error("Engine still answering after quit")

        self._clear_pid()
        self._remove_stale_socket()

        if power_off:
            self._best_effort(self.display.power_off, "power off")

        logger.info("Playback stopped" if was_running else "Stop requested while idle")
        return was_running

    def start(self, media_path: str) -> Session:
        """
        Launch the engine on media_path, replacing any live session.

        Raises:
            MediaNotFound: Path is not an existing regular file (checked first)
            EngineLaunchFailed: Executable missing, engine exited early, or the
                previous engine could not be stopped
            EngineUnreachable: Control socket did not come up in time
        """
        resolved = resolve_media_path(media_path)

        if self._read_pid() is not None or self.is_live():
            self.stop(power_off=False)
            if self.is_live():
                raise EngineLaunchFailed("The running engine could not be stopped")

        self._best_effort(self.display.power_on, "power on")
        if self.display.wake_delay > 0:
            time.sleep(self.display.wake_delay)

        self._remove_stale_socket()

        cmd = build_engine_command(self.config, resolved)
        logger.info(f"Starting engine for {resolved} with socket {self.socket_path}")
        logger.debug(f"Engine command: {cmd}")

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise EngineLaunchFailed(
                f"Failed to start {self.config.player.executable}: {e}"
            ) from e

        self._write_pid(process.pid)

        timeout = self.config.player.launch_timeout
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            exit_code = process.poll()
            if exit_code is not None:
                self._clear_pid()
                raise EngineLaunchFailed(f"Engine exited during startup (code {exit_code})")
            if self.channel.is_connectable():
                logger.info(f"Engine started (pid={process.pid})")
                return Session(socket_path=self.socket_path, channel=self.channel, pid=process.pid)
            time.sleep(POLL_INTERVAL)

        logger.error(f"Control socket creation timeout after {timeout}s")
        process.kill()
        self._clear_pid()
        raise EngineUnreachable(f"Engine did not open {self.socket_path} within {timeout}s")
