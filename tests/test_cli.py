"""
Tests for the command-line entry point.
"""

from unittest.mock import MagicMock, patch

import pytest

from cinema_pi import cli
from cinema_pi.result import Error, NeedsInput, Ok


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """Config pointing every path into tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("FILMS_DIR", raising=False)
    monkeypatch.delenv("CINEMA_FILMS_DIR", raising=False)
    monkeypatch.delenv("CINEMA_SOCKET_PATH", raising=False)

    films = tmp_path / "Movies"
    films.mkdir()
    (films / "Heat.mkv").write_bytes(b"")

    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[media]
films_dir = "{films}"

[player]
socket_path = "{tmp_path / 'mpv.sock'}"

[display]
enabled = false

[logging]
log_file = "{tmp_path / 'cinema.log'}"
"""
    )
    return path


class TestRun:
    """Test full invocations without a running engine."""

    def test_help(self, config_file, capsys):
        assert cli.run(["--config", str(config_file), "help"]) == 0
        assert "Cinema Pi" in capsys.readouterr().out

    def test_default_command_is_help(self, config_file, capsys):
        assert cli.run(["--config", str(config_file)]) == 0
        assert "goto <name>" in capsys.readouterr().out

    def test_list(self, config_file, capsys):
        assert cli.run(["--config", str(config_file), "list"]) == 0
        assert "Heat" in capsys.readouterr().out

    def test_idle_session_command(self, config_file, capsys):
        """Test a session command with nothing playing exits 1 on stderr."""
        assert cli.run(["--config", str(config_file), "pause"]) == 1
        captured = capsys.readouterr()
        assert "No playback currently running" in captured.err
        assert captured.out == ""

    def test_unknown_command(self, config_file, capsys):
        assert cli.run(["--config", str(config_file), "dance"]) == 1
        assert "Unknown command" in capsys.readouterr().err

    def test_arguments_passed_through(self, config_file):
        with patch("cinema_pi.cli.handle_command", return_value=Ok("ok")) as handle:
            cli.run(["--config", str(config_file), "rewind", "1:30"])
        assert handle.call_args[0][1:] == ("rewind", ["1:30"])

    def test_writes_log_file(self, config_file, tmp_path):
        cli.run(["--config", str(config_file), "help"])
        assert (tmp_path / "cinema.log").exists()


class TestRunCommand:
    """Test resolution of commands that need more input."""

    def test_non_interactive_needs_input_is_error(self):
        with patch("cinema_pi.cli.handle_command", return_value=NeedsInput("name", "Bookmark name")):
            result = cli.run_command(MagicMock(), "mark", [], interactive=False)
        assert isinstance(result, Error)
        assert result.code == "invalid_argument"

    def test_prompted_value_redispatched(self):
        """Test the answer is dispatched as the command's argument."""
        replies = [NeedsInput("name", "Bookmark name"), Ok("saved")]
        with patch("cinema_pi.cli.handle_command", side_effect=replies) as handle, patch(
            "cinema_pi.cli.prompt_for_input", return_value="heist"
        ):
            result = cli.run_command(MagicMock(), "mark", [], interactive=True)
        assert result == Ok("saved")
        assert handle.call_args[0][1:] == ("mark", ["heist"])

    def test_empty_answer(self):
        with patch("cinema_pi.cli.handle_command", return_value=NeedsInput("name", "Bookmark name")), patch(
            "cinema_pi.cli.prompt_for_input", return_value=None
        ):
            result = cli.run_command(MagicMock(), "mark", [], interactive=True)
        assert result.code == "invalid_argument"

    def test_cancelled_prompt(self):
        with patch("cinema_pi.cli.handle_command", return_value=NeedsInput("query", "Select a movie")), patch(
            "cinema_pi.cli.prompt_for_input", side_effect=KeyboardInterrupt
        ):
            result = cli.run_command(MagicMock(), "play", [], interactive=True)
        assert result == Error("invalid_argument", "Cancelled")

    def test_prompt_loop_is_bounded(self):
        """Test a command that keeps asking eventually gives up."""
        with patch("cinema_pi.cli.handle_command", return_value=NeedsInput("name", "Bookmark name")) as handle, patch(
            "cinema_pi.cli.prompt_for_input", return_value="x"
        ):
            result = cli.run_command(MagicMock(), "mark", [], interactive=True)
        assert isinstance(result, Error)
        assert handle.call_count == cli.MAX_PROMPTS + 1


class TestPromptForInput:
    def test_choice_by_number(self):
        with patch("cinema_pi.cli.IntPrompt.ask", return_value=2):
            value = cli.prompt_for_input(NeedsInput("query", "Select a movie", ["Alien", "Heat"]))
        assert value == "Heat"

    def test_free_text(self):
        with patch("cinema_pi.cli.Prompt.ask", return_value="  bank job "):
            assert cli.prompt_for_input(NeedsInput("name", "Bookmark name")) == "bank job"

    def test_blank_text(self):
        with patch("cinema_pi.cli.Prompt.ask", return_value="   "):
            assert cli.prompt_for_input(NeedsInput("name", "Bookmark name")) is None


class TestPrintResult:
    def test_ok(self, capsys):
        assert cli.print_result(Ok("Resuming playback")) == 0
        assert "Resuming playback" in capsys.readouterr().out

    def test_error(self, capsys):
        assert cli.print_result(Error("bookmark_not_found", "Bookmark 'x' not found")) == 1
        assert "Error: Bookmark 'x' not found" in capsys.readouterr().err
