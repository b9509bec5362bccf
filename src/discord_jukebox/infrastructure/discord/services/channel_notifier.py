"""Posts playback notifications to the text channel a guild last used."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from discord_jukebox.domain.shared.events import (
    QueueExhausted,
    SessionDestroyed,
    TrackPlaybackFailed,
    TrackStartedPlaying,
)
from discord_jukebox.domain.music.value_objects import TeardownReason
from discord_jukebox.domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from discord_jukebox.domain.shared.events import EventBus

logger = logging.getLogger(__name__)


class ChannelNotifier:
    """Subscribes to engine events and relays them as chat messages.

    The channel is whichever one the most recent ``/play`` or ``/join`` came
    from; guilds that never used a command get no notifications.
    """

    def __init__(self, bot: discord.Client, event_bus: EventBus) -> None:
        self._bot = bot
        self._bus = event_bus
        self._channels: dict[int, int] = {}
        self._started = False

    def remember_channel(self, guild_id: int, channel_id: int) -> None:
        self._channels[guild_id] = channel_id

    def channel_for(self, guild_id: int) -> int | None:
        return self._channels.get(guild_id)

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(TrackStartedPlaying, self._on_track_started)
        self._bus.subscribe(TrackPlaybackFailed, self._on_track_failed)
        self._bus.subscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.subscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(TrackStartedPlaying, self._on_track_started)
        self._bus.unsubscribe(TrackPlaybackFailed, self._on_track_failed)
        self._bus.unsubscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.unsubscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = False

    async def _on_track_started(self, event: TrackStartedPlaying) -> None:
        await self._send(event.guild_id, DiscordUIMessages.NOW_PLAYING.format(title=event.track_title))

    async def _on_track_failed(self, event: TrackPlaybackFailed) -> None:
        await self._send(event.guild_id, DiscordUIMessages.CANNOT_PLAY.format(title=event.track_title))

    async def _on_queue_exhausted(self, event: QueueExhausted) -> None:
        await self._send(event.guild_id, DiscordUIMessages.QUEUE_FINISHED)

    async def _on_session_destroyed(self, event: SessionDestroyed) -> None:
        # /leave answers for itself.
        if event.reason == TeardownReason.LEAVE.value:
            return
        await self._send(event.guild_id, DiscordUIMessages.LEFT_VOICE_CHANNEL)

    async def _send(self, guild_id: int, message: str) -> None:
        channel_id = self._channels.get(guild_id)
        channel = self._bot.get_channel(channel_id) if channel_id is not None else None
        if not isinstance(channel, discord.abc.Messageable):
            logger.debug(LogTemplates.NOTIFY_NO_CHANNEL, guild_id, message)
            return

        try:
            await channel.send(message)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTIFY_SEND_FAILED, guild_id, e)
