"""Tests for the reusable slash-command guard helpers."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member,
    member_voice_channel_id,
    send_ephemeral,
    send_reply,
)


@pytest.fixture
def interaction():
    """Fresh interaction that has not been responded to."""
    interaction = MagicMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


class TestSend:
    """Tests for the reply helpers."""

    @pytest.mark.asyncio
    async def test_ephemeral_initial_response(self, interaction):
        """Should use the initial response when available."""
        await send_ephemeral(interaction, "hi")
        interaction.response.send_message.assert_awaited_once_with("hi", ephemeral=True)

    @pytest.mark.asyncio
    async def test_ephemeral_followup(self, interaction):
        """Should use the followup once the interaction was answered."""
        interaction.response.is_done.return_value = True
        await send_ephemeral(interaction, "hi")
        interaction.followup.send.assert_awaited_once_with("hi", ephemeral=True)

    @pytest.mark.asyncio
    async def test_public_reply_after_defer(self, interaction):
        """Should send a public followup after a defer."""
        interaction.response.is_done.return_value = True
        await send_reply(interaction, "done")
        interaction.followup.send.assert_awaited_once_with("done")


class TestMember:
    """Tests for member and voice channel lookup."""

    @pytest.mark.asyncio
    async def test_member_returned(self, interaction):
        """Should return the member for guild interactions."""
        member = MagicMock(spec=discord.Member)
        interaction.user = member

        assert await get_member(interaction) is member
        interaction.response.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dm_rejected(self, interaction):
        """Should reject interactions outside a guild."""
        interaction.guild = None
        assert await get_member(interaction) is None
        interaction.response.send_message.assert_awaited_once()

    def test_voice_channel_id(self):
        """Should read the member's current voice channel."""
        member = MagicMock()
        member.voice.channel.id = 42
        assert member_voice_channel_id(member) == 42

    def test_no_voice_state(self):
        """Should return None when the member is not in voice."""
        member = MagicMock()
        member.voice = None
        assert member_voice_channel_id(member) is None
