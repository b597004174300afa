"""
Tests for the playback session lifecycle.
"""

import os
from unittest.mock import MagicMock, patch

import psutil
import pytest

from cinema_pi.core.config import Config
from cinema_pi.core.exceptions import EngineLaunchFailed, EngineUnreachable, MediaNotFound
from cinema_pi.domain.playback.session import (
    SessionManager,
    build_engine_command,
    resolve_media_path,
)

POPEN = "cinema_pi.domain.playback.session.subprocess.Popen"
PROCESS = "cinema_pi.domain.playback.session.psutil.Process"


@pytest.fixture
def config(tmp_path, socket_dir, monkeypatch):
    """Config with a private socket, data dir and fast timeouts."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    cfg = Config()
    cfg.player.socket_path = os.path.join(socket_dir, "mpv.sock")
    cfg.player.launch_timeout = 1.0
    cfg.player.stop_grace = 0.3
    cfg.display.wake_delay = 0.0
    cfg.ipc.timeout = 1.0
    return cfg


@pytest.fixture
def display():
    mock = MagicMock()
    mock.wake_delay = 0.0
    return mock


@pytest.fixture
def manager(config, display):
    return SessionManager(config, display=display)


@pytest.fixture
def movie(tmp_path):
    path = tmp_path / "movies" / "Heat.mkv"
    path.parent.mkdir()
    path.write_bytes(b"\x00")
    return path


def engine_process(pid=4242, exit_code=None):
    process = MagicMock()
    process.pid = pid
    process.poll.return_value = exit_code
    return process


def owned_process(manager, pid=4242):
    process = MagicMock()
    process.pid = pid
    process.cmdline.return_value = ["mpv", f"--input-ipc-server={manager.socket_path}", "/m.mkv"]
    return process


class TestHelpers:
    def test_resolve_media_path(self, movie):
        assert resolve_media_path(str(movie)) == movie.resolve()

    def test_resolve_missing(self, tmp_path):
        with pytest.raises(MediaNotFound):
            resolve_media_path(str(tmp_path / "nope.mkv"))

    def test_resolve_directory(self, tmp_path):
        """Test a directory is not playable."""
        with pytest.raises(MediaNotFound):
            resolve_media_path(str(tmp_path))

    def test_build_engine_command(self, config, movie):
        """Test the socket flag and full path end the argv."""
        cmd = build_engine_command(config, movie)
        assert cmd[0] == "mpv"
        assert cmd[-2] == f"--input-ipc-server={config.player.socket_path}"
        assert cmd[-1] == str(movie)
        assert "--fs" in cmd


class TestLiveness:
    def test_idle(self, manager):
        assert not manager.is_live()
        assert manager.current() is None

    def test_live(self, manager, mpv_factory):
        """Test a connectable socket yields a session with the recorded pid."""
        mpv_factory(manager.socket_path)
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")

        session = manager.current()
        assert session is not None
        assert session.socket_path == manager.socket_path
        assert session.pid == 4242


class TestStart:
    """Test launching the engine."""

    def test_missing_media_has_no_side_effects(self, manager, display, tmp_path):
        """Test a bad path fails before the display or engine are touched."""
        with patch(POPEN) as popen:
            with pytest.raises(MediaNotFound):
                manager.start(str(tmp_path / "missing.mkv"))
        popen.assert_not_called()
        display.power_on.assert_not_called()

    def test_start(self, manager, display, movie, mpv_factory):
        """Test launch waits for the socket and records the pid."""
        process = engine_process()

        def launch(cmd, **kwargs):
            mpv_factory(manager.socket_path)
            return process

        with patch(POPEN, side_effect=launch) as popen:
            session = manager.start(str(movie))

        assert session.pid == 4242
        assert manager.pid_path.read_text().strip() == "4242"
        display.power_on.assert_called_once()

        cmd = popen.call_args[0][0]
        assert cmd[-1] == str(movie.resolve())
        assert popen.call_args[1]["start_new_session"] is True

    def test_executable_missing(self, manager, movie):
        with patch(POPEN, side_effect=FileNotFoundError("mpv")):
            with pytest.raises(EngineLaunchFailed) as exc_info:
                manager.start(str(movie))
        assert exc_info.value.code == "engine_launch_failed"

    def test_engine_exits_early(self, manager, movie):
        """Test an engine dying during startup is reported and forgotten."""
        with patch(POPEN, return_value=engine_process(exit_code=2)):
            with pytest.raises(EngineLaunchFailed):
                manager.start(str(movie))
        assert not manager.pid_path.exists()

    def test_socket_never_appears(self, manager, movie, config):
        """Test a launch timeout kills the engine."""
        config.player.launch_timeout = 0.3
        process = engine_process()
        with patch(POPEN, return_value=process):
            with pytest.raises(EngineUnreachable):
                manager.start(str(movie))
        process.kill.assert_called_once()
        assert not manager.pid_path.exists()

    def test_replaces_running_engine(self, manager, movie, mpv_factory):
        """Test a live engine is stopped before a new one starts."""
        old = mpv_factory(manager.socket_path)
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("1111\n")
        old_process = owned_process(manager, pid=1111)

        def terminate():
            old.stop()

        old_process.terminate.side_effect = terminate
        new_process = engine_process(pid=2222)

        def launch(cmd, **kwargs):
            mpv_factory(manager.socket_path)
            return new_process

        with patch(PROCESS, return_value=old_process), patch(POPEN, side_effect=launch):
            session = manager.start(str(movie))

        old_process.terminate.assert_called_once()
        assert session.pid == 2222


class TestStop:
    """Test stopping the engine."""

    def test_stop_idle(self, manager, display):
        """Test stopping with nothing running is a successful no-op."""
        assert manager.stop() is False
        display.power_off.assert_called_once()

    def test_stop_without_power_off(self, manager, display):
        manager.stop(power_off=False)
        display.power_off.assert_not_called()

    def test_stop_owned_process(self, manager):
        """Test graceful termination of the recorded engine."""
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")
        process = owned_process(manager)

        with patch(PROCESS, return_value=process):
            assert manager.stop() is True

        process.terminate.assert_called_once()
        process.kill.assert_not_called()
        assert not manager.pid_path.exists()

    def test_stop_escalates_to_kill(self, manager):
        """Test an engine ignoring SIGTERM is killed after the grace period."""
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")
        process = owned_process(manager)
        process.wait.side_effect = [psutil.TimeoutExpired(0.3), None]

        with patch(PROCESS, return_value=process):
            manager.stop()

        process.terminate.assert_called_once()
        process.kill.assert_called_once()

    def test_access_denied_does_not_raise(self, manager):
        """Test an engine we may not signal still lets stop finish."""
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")
        process = owned_process(manager)
        process.terminate.side_effect = psutil.AccessDenied(4242)

        with patch(PROCESS, return_value=process):
            assert manager.stop() is True

        process.kill.assert_not_called()
        assert not manager.pid_path.exists()

    def test_recycled_pid_not_signalled(self, manager):
        """Test a pid now owned by another program is left alone."""
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")
        stranger = MagicMock()
        stranger.cmdline.return_value = ["bash"]

        with patch(PROCESS, return_value=stranger):
            assert manager.stop() is False

        stranger.terminate.assert_not_called()
        stranger.kill.assert_not_called()
        assert not manager.pid_path.exists()

    def test_dead_pid(self, manager):
        manager.pid_path.parent.mkdir(parents=True, exist_ok=True)
        manager.pid_path.write_text("4242\n")
        with patch(PROCESS, side_effect=psutil.NoSuchProcess(4242)):
            assert manager.stop() is False

    def test_quit_over_socket_without_pid(self, manager, mpv_factory):
        """Test an engine with no recorded pid is asked to quit."""
        server = mpv_factory(manager.socket_path)

        assert manager.stop() is True

        assert server.quit_received
        assert not manager.is_live()
        assert not os.path.exists(manager.socket_path)

    def test_display_failure_ignored(self, manager, display):
        """Test a CEC failure never breaks stop."""
        display.power_off.side_effect = OSError("no cec")
        assert manager.stop() is False
