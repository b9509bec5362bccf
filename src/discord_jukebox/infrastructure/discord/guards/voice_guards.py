"""Reusable guard functions for Discord slash commands.

These are free functions that accept the interaction explicitly rather than
relying on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import discord

from discord_jukebox.domain.shared.messages import DiscordUIMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def send_reply(interaction: discord.Interaction, message: str) -> None:
    """Send a public reply, handling both fresh and deferred interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message)
    else:
        await interaction.response.send_message(message)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """Validate that the interaction comes from a guild member. Returns None with error on failure."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
        return None

    return user


def member_voice_channel_id(member: discord.Member) -> int | None:
    """ID of the voice channel the member is currently in, if any."""
    if member.voice is None or member.voice.channel is None:
        return None
    return member.voice.channel.id
