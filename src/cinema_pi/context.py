"""Application context for explicit state passing.

Every command handler receives the same AppContext instead of reaching for
module-level globals: configuration, the session manager that owns the one
engine, and the bookmark store.
"""

from dataclasses import dataclass

from cinema_pi.core.config import Config
from cinema_pi.domain.bookmarks.store import BookmarkStore
from cinema_pi.domain.playback.session import SessionManager


@dataclass(frozen=True)
class AppContext:
    """Application context passed to all command handlers.

    Attributes:
        config: Application configuration
        sessions: Owner of the single playback engine
        bookmarks: Shared bookmark store
    """

    config: Config
    sessions: SessionManager
    bookmarks: BookmarkStore

    @classmethod
    def create(cls, config: Config) -> "AppContext":
        """Create the context for one command invocation.

        Args:
            config: Application configuration

        Returns:
            New AppContext wired to the configured socket and bookmark file
        """
        return cls(
            config=config,
            sessions=SessionManager(config),
            bookmarks=BookmarkStore(config.marks_path),
        )
