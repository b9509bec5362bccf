"""Interaction guards shared by cogs."""

from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member,
    member_voice_channel_id,
    send_ephemeral,
    send_reply,
)

__all__ = ["get_member", "member_voice_channel_id", "send_ephemeral", "send_reply"]
