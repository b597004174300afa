"""Bookmarks domain - named time offsets persisted per media file.

This domain handles:
- Bookmark records and their line encoding
- The shared, lock-protected bookmark file
"""

from .models import Bookmark, FIELD_DELIMITER
from .store import BookmarkStore

__all__ = [
    "Bookmark",
    "BookmarkStore",
    "FIELD_DELIMITER",
]
