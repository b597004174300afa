"""Library domain - the flat directory of movies that play/random/list draw from."""

from .scanner import (
    display_name,
    find_by_display_name,
    list_media,
    pick_random,
    search_media,
)

__all__ = [
    "display_name",
    "find_by_display_name",
    "list_media",
    "pick_random",
    "search_media",
]
