"""YouTube Data API integration."""

from discord_jukebox.infrastructure.youtube.api_client import YouTubeApiClient

__all__ = ["YouTubeApiClient"]
