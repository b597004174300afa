"""
Media library scanning for Cinema Pi.

The library is a single flat directory; hidden files are ignored and only
configured extensions are listed.
"""

import random
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from cinema_pi.core.exceptions import MediaNotFound


def list_media(films_dir: str, extensions: Sequence[str]) -> List[Path]:
    """
    List playable files directly inside films_dir, sorted by name.

    Args:
        films_dir: Media root directory
        extensions: Allowed suffixes (case-insensitive, with leading dot)

    Raises:
        MediaNotFound: If films_dir is not an accessible directory
    """
    root = Path(films_dir).expanduser()
    if not root.is_dir():
        raise MediaNotFound(f"{root} not found")

    allowed = {ext.lower() for ext in extensions}
    try:
        entries = list(root.iterdir())
    except OSError as e:
        raise MediaNotFound(f"{root} is not readable: {e}") from e

    files = [
        entry
        for entry in entries
        if not entry.name.startswith(".")
        and entry.suffix.lower() in allowed
        and entry.is_file()
    ]
    logger.debug(f"Found {len(files)} media files in {root}")
    return sorted(files, key=lambda p: p.name)


def display_name(path: Path) -> str:
    """Title shown to the user: file name without extension."""
    return path.stem


def search_media(films_dir: str, extensions: Sequence[str], query: str) -> Path:
    """
    Return the first file (in sorted order) whose name contains query.

    Raises:
        MediaNotFound: If nothing matches
    """
    needle = query.strip().lower()
    for path in list_media(films_dir, extensions):
        if needle in path.name.lower():
            return path
    raise MediaNotFound(f"No movie found containing '{query}'")


def find_by_display_name(files: Sequence[Path], title: str) -> Optional[Path]:
    """Map a displayed title back to its file."""
    for path in files:
        if display_name(path) == title:
            return path
    return None


def pick_random(films_dir: str, extensions: Sequence[str], rng: Optional[random.Random] = None) -> Path:
    """
    Pick a random playable file.

    Raises:
        MediaNotFound: If the library is empty
    """
    files = list_media(films_dir, extensions)
    if not files:
        raise MediaNotFound(f"No movies in {films_dir}")
    return (rng or random).choice(files)
