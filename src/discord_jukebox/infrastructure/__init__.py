"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cog, voice adapter, channel notifier)
- Audio (yt-dlp metadata, yt-dlp to ffmpeg pipeline, media cache)
- YouTube Data API client
- Local data directories
"""

from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_jukebox.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceAdapter",
]
