"""droplist - play publicly shared remote folders as playlists."""

__version__ = "0.3.0"
