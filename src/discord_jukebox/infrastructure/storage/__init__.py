"""Local filesystem storage."""

from discord_jukebox.infrastructure.storage.directories import bootstrap_directories

__all__ = ["bootstrap_directories"]
