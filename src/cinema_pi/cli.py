"""
Cinema Pi CLI - Entry point

Every invocation is short-lived: load config, run one command against the
engine (or start/stop it), print the result and exit with 0 or 1.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from rich.markup import escape
from rich.prompt import IntPrompt, Prompt

from cinema_pi import __version__
from cinema_pi.context import AppContext
from cinema_pi.core.config import ensure_directories, load_config
from cinema_pi.core.console import get_console
from cinema_pi.core.output import log, setup_loguru
from cinema_pi.result import CommandResult, Error, NeedsInput, Ok
from cinema_pi.router import handle_command

# A prompt answer is re-dispatched at most this many times
MAX_PROMPTS = 2


def prompt_for_input(needs: NeedsInput) -> Optional[str]:
    """
    Ask the user for the value a command is missing.

    Args:
        needs: What the command asked for

    Returns:
        The value, or None if the user gave nothing
    """
    console = get_console()

    if needs.choices:
        for index, choice in enumerate(needs.choices, 1):
            console.print(f"  [cyan]{index:>3}[/cyan]. {escape(choice)}")
        selection = IntPrompt.ask(
            needs.prompt,
            choices=[str(i) for i in range(1, len(needs.choices) + 1)],
            show_choices=False,
            console=console,
        )
        return needs.choices[selection - 1]

    value = Prompt.ask(needs.prompt, console=console).strip()
    return value or None


def run_command(ctx: AppContext, command: str, args: List[str], interactive: bool) -> CommandResult:
    """
    Dispatch a command, prompting for missing input when interactive.

    Returns:
        Ok or Error; NeedsInput is always resolved or turned into an Error
    """
    result = handle_command(ctx, command, args)

    for _ in range(MAX_PROMPTS):
        if not isinstance(result, NeedsInput):
            return result
        if not interactive:
            break

        try:
            value = prompt_for_input(result)
        except (KeyboardInterrupt, EOFError):
            return Error("invalid_argument", "Cancelled")
        if value is None:
            return Error("invalid_argument", f"No {result.field} given")

        logger.debug(f"Prompted {result.field}={value!r} for '{command}'")
        result = handle_command(ctx, command, [value])

    if isinstance(result, NeedsInput):
        return Error("invalid_argument", f"Missing {result.field} for '{command}'")
    return result


def print_result(result: CommandResult) -> int:
    """Print a result for the user and return the exit code."""
    if isinstance(result, Ok):
        log(result.message, level="info")
    elif isinstance(result, Error):
        log(f"Error: {result.message}", level="error")
    return result.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cinema",
        description="Cinema Pi - Movie playback control for mpv",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run 'cinema help' for the list of commands.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.toml (default: project or XDG config)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs="?", default="help", help="Command to run")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run one command and return the exit code."""
    parser = build_parser()
    options = parser.parse_args(argv)

    config = load_config(options.config)
    ensure_directories()
    level = "DEBUG" if options.verbose else config.logging.level
    setup_loguru(
        config.log_path,
        level=level,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
        console_output=options.verbose or config.logging.console_output,
    )

    ctx = AppContext.create(config)
    result = run_command(ctx, options.command, options.args, interactive=sys.stdin.isatty())
    return print_result(result)


def main() -> None:
    """Main entry point for the cinema command."""
    sys.exit(run())


if __name__ == "__main__":
    main()
