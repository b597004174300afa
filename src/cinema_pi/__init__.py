"""Cinema Pi - command-line control of an mpv movie player."""

__version__ = "0.1.0"
