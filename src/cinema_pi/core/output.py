"""
Unified output system using Loguru.
File logging for every invocation, console printing for user-facing messages.
"""

import sys
from pathlib import Path

from loguru import logger

from .console import get_console, get_error_console


def setup_loguru(
    log_file: Path,
    level: str = "INFO",
    max_file_size_mb: int = 10,
    backup_count: int = 5,
    console_output: bool = False,
) -> None:
    """
    Configure loguru for file logging, with an optional stderr sink.

    Args:
        log_file: Path to log file
        level: Minimum level for logging (DEBUG, INFO, WARNING, ERROR)
        max_file_size_mb: Rotate the log file at this size
        backup_count: Number of rotated files to keep
        console_output: Also emit log records on stderr
    """
    # Remove default handler
    logger.remove()

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation=f"{max_file_size_mb} MB",
            retention=backup_count,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {process} | {name}:{line} | {message}",
            enqueue=False,  # Synchronous writes; each invocation is short-lived
        )
    except OSError as e:
        # Read-only data dir must not stop playback control
        print(f"Warning: cannot write log file {log_file}: {e}", file=sys.stderr)

    if console_output:
        logger.add(sys.stderr, level=level, format="{level}: {message}")

    logger.debug(f"Loguru initialized: {log_file} (level={level})")


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to the log file AND prints for the user.

    Warnings and errors go to stderr, everything else to stdout.

    Args:
        message: User-facing message
        level: Log level (debug, info, warning, error)
    """
    log_func = getattr(logger, level)
    log_func(message)

    if level == "debug":
        return
    if level in ("warning", "error"):
        style = "yellow" if level == "warning" else "red"
        get_error_console().print(message, style=style, markup=False, highlight=False)
    else:
        get_console().print(message, markup=False, highlight=False)
