"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from discord_jukebox.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from discord_jukebox.domain.music.value_objects import PcmFormat
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.stream_acquirer import AudioStream

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot
        self._on_track_end: TrackEndCallback | None = None

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            return False

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return False

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                await channel.connect(self_deaf=True)
            logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True  # Not connected

        await vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    async def play(self, guild_id: int, stream: AudioStream, *, token: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return False

        # discord.py encodes 16-bit PCM only.
        sample_format = getattr(stream, "sample_format", PcmFormat.S16LE)
        if not isinstance(stream, discord.AudioSource) or sample_format is not PcmFormat.S16LE:
            logger.error(LogTemplates.VOICE_UNSUPPORTED_FORMAT, sample_format)
            return False

        if vc.is_playing() or vc.is_paused():
            vc.stop()

        loop = self._bot.loop

        def after_callback(error: Exception | None = None) -> None:
            logger.debug(LogTemplates.TRACK_ENDED, guild_id, token, error)
            asyncio.run_coroutine_threadsafe(self._handle_track_end(guild_id, token), loop)

        try:
            vc.play(stream, after=after_callback)
        except discord.ClientException as e:
            logger.error(LogTemplates.PLAYBACK_FAILED_START, e)
            return False

        logger.info(LogTemplates.PLAYBACK_STARTED, guild_id, token)
        return True

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)

        return True

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._on_track_end = callback

    async def _handle_track_end(self, guild_id: int, token: int) -> None:
        """Called from the audio player thread via run_coroutine_threadsafe."""
        if self._on_track_end is None:
            logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK, guild_id)
            return

        try:
            await self._on_track_end(guild_id, token)
        except Exception as e:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, guild_id, e)
