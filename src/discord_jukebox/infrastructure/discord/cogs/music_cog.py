"""Slash-command music cog delegating to the queue service and playback engine."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.domain.music.value_objects import SkipOutcome
from discord_jukebox.domain.shared.exceptions import (
    AlreadyConnectedError,
    NotConnectedError,
    ResolutionError,
    VoiceConnectionError,
)
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member,
    member_voice_channel_id,
    send_ephemeral,
    send_reply,
)

if TYPE_CHECKING:
    from ....application.services.queue_service import EnqueueResult
    from ....config.container import Container

logger = logging.getLogger(__name__)

SKIP_REPLIES: dict[SkipOutcome, str] = {
    SkipOutcome.SKIPPED: DiscordUIMessages.SONG_SKIPPED,
    SkipOutcome.QUEUE_ENDED: DiscordUIMessages.QUEUE_ENDED,
    SkipOutcome.NOTHING_PLAYING: DiscordUIMessages.NOTHING_TO_PLAY,
}


def format_enqueue_reply(result: EnqueueResult, query: str) -> str:
    if result.added == 0:
        if result.from_url:
            return DiscordUIMessages.SONGS_ADDED.format(count=0)
        return DiscordUIMessages.NOTHING_FOUND.format(query=query)
    if result.added == 1:
        return DiscordUIMessages.SONG_ADDED
    return DiscordUIMessages.SONGS_ADDED.format(count=result.added)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    def _remember_channel(self, interaction: discord.Interaction) -> None:
        if interaction.guild and interaction.channel_id:
            self.container.channel_notifier.remember_channel(
                interaction.guild.id, interaction.channel_id
            )

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        member = await get_member(interaction)
        if member is None:
            return
        assert interaction.guild is not None

        channel_id = member_voice_channel_id(member)
        if channel_id is None:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
            return

        self._remember_channel(interaction)
        try:
            await self.container.playback_engine.join(interaction.guild.id, channel_id)
        except AlreadyConnectedError as exc:
            await send_ephemeral(interaction, exc.message)
            return
        except VoiceConnectionError:
            await send_ephemeral(interaction, DiscordUIMessages.CANNOT_JOIN)
            return

        await send_reply(interaction, DiscordUIMessages.JOINED)

    @app_commands.command(name="leave", description="Clear the queue and leave the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        try:
            await self.container.playback_engine.leave(interaction.guild.id)
        except NotConnectedError as exc:
            await send_ephemeral(interaction, exc.message)
            return

        await send_reply(interaction, DiscordUIMessages.LEFT_VOICE_CHANNEL)

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(song="URL or search query")
    async def play(self, interaction: discord.Interaction, song: str) -> None:
        member = await get_member(interaction)
        if member is None:
            return
        assert interaction.guild is not None
        guild_id = interaction.guild.id

        await interaction.response.defer()
        self._remember_channel(interaction)

        engine = self.container.playback_engine
        if not self.container.voice_adapter.is_connected(guild_id):
            channel_id = member_voice_channel_id(member)
            if channel_id is None:
                await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
                return
            try:
                await engine.join(guild_id, channel_id)
            except AlreadyConnectedError:
                pass
            except VoiceConnectionError:
                await send_ephemeral(interaction, DiscordUIMessages.CANNOT_JOIN)
                return
            await asyncio.sleep(self.container.settings.discord.join_settle_seconds)

        try:
            result = await self.container.queue_service.enqueue(guild_id, song)
        except (ResolutionError, ValueError) as exc:
            logger.warning(LogTemplates.ENQUEUE_FAILED, song, guild_id, exc)
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_ADDING)
            return

        await send_reply(interaction, format_enqueue_reply(result, song))

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
            return

        await interaction.response.defer()
        try:
            outcome = await self.container.playback_engine.skip(interaction.guild.id)
        except NotConnectedError as exc:
            await send_ephemeral(interaction, exc.message)
            return

        await send_reply(interaction, SKIP_REPLIES[outcome])


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
