"""Domain layer: bookmarks, playback engine control and the media library."""
