"""
Unit Tests for Application Settings

Tests for configuration validation:
- DiscordSettings
- AudioSettings
- YouTubeSettings
- Settings (main container)
"""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from discord_jukebox.config.settings import (
    AudioSettings,
    DiscordSettings,
    Settings,
    YouTubeSettings,
    clear_settings_cache,
    get_settings,
)
from discord_jukebox.domain.music.value_objects import PcmFormat

# =============================================================================
# DiscordSettings Tests
# =============================================================================


class TestDiscordSettings:
    """Tests for DiscordSettings configuration."""

    def test_create_with_defaults(self):
        """Should create with an empty token and default prefix."""
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.command_prefix == "~"
        assert discord.test_guild_ids == ()
        assert discord.sync_on_startup is False
        assert discord.join_settle_seconds == 0.5

    def test_token_alias(self):
        """Should accept bot_token as an alias."""
        discord = DiscordSettings(bot_token=SecretStr("aliased"))
        assert discord.token.get_secret_value() == "aliased"

    def test_guild_ids_list_becomes_tuple(self):
        """Should convert a list of guild ids to a tuple."""
        discord = DiscordSettings(test_guild_ids=[111, 222])
        assert discord.test_guild_ids == (111, 222)

    @pytest.mark.parametrize("bad", [0, -1, 2**64])
    def test_invalid_guild_ids(self, bad: int):
        """Should reject ids outside the snowflake range."""
        with pytest.raises(ValidationError):
            DiscordSettings(test_guild_ids=(bad,))

    def test_negative_settle_rejected(self):
        """Should reject a negative join pause."""
        with pytest.raises(ValidationError):
            DiscordSettings(join_settle_seconds=-1.0)

    def test_immutability(self):
        """Should reject mutation."""
        discord = DiscordSettings()
        with pytest.raises(ValidationError):
            discord.command_prefix = "!"  # type: ignore[misc]


# =============================================================================
# AudioSettings Tests
# =============================================================================


class TestAudioSettings:
    """Tests for AudioSettings configuration."""

    def test_defaults(self):
        """Should default to yt-dlp, ffmpeg and Discord's PCM layout."""
        audio = AudioSettings()

        assert audio.downloader_command == "yt-dlp"
        assert audio.transcoder_command == "ffmpeg"
        assert audio.ytdlp_format == "webm[abr>0]/bestaudio/best"
        assert audio.sample_format is PcmFormat.S16LE
        assert (audio.sample_rate, audio.channels) == (48000, 2)
        assert audio.cache_media is False

    def test_cache_paths(self):
        """Should derive cache directories from data_dir."""
        audio = AudioSettings(data_dir="/srv/bot")

        assert audio.cache_dir == Path("/srv/bot/cache")
        assert audio.media_cache_dir == Path("/srv/bot/cache/media")

    def test_command_aliases(self):
        """Should accept ytdlp_command and ffmpeg_command aliases."""
        audio = AudioSettings(ytdlp_command="/opt/yt-dlp", ffmpeg_command="/opt/ffmpeg")

        assert audio.downloader_command == "/opt/yt-dlp"
        assert audio.transcoder_command == "/opt/ffmpeg"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"pcm_format": "u8"},
            {"sample_rate": 1000},
            {"channels": 6},
            {"ready_timeout_seconds": 0.0},
            {"downloader_command": ""},
        ],
    )
    def test_invalid_values(self, overrides: dict):
        """Should reject out-of-range audio settings."""
        with pytest.raises(ValidationError):
            AudioSettings(**overrides)


# =============================================================================
# YouTubeSettings Tests
# =============================================================================


class TestYouTubeSettings:
    """Tests for YouTubeSettings configuration."""

    def test_disabled_without_key(self):
        """Should be disabled when no API key is set."""
        assert YouTubeSettings().enabled is False

    def test_enabled_with_key(self):
        """Should be enabled with an API key."""
        youtube = YouTubeSettings(youtube_token=SecretStr("key"))
        assert youtube.enabled is True
        assert youtube.api_key.get_secret_value() == "key"

    def test_page_limit_must_be_positive(self):
        """Should reject a zero page limit."""
        with pytest.raises(ValidationError):
            YouTubeSettings(max_pages=0)


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Tests for the main Settings container."""

    def test_defaults(self):
        """Should build nested defaults."""
        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert isinstance(settings.audio, AudioSettings)
        assert isinstance(settings.youtube, YouTubeSettings)

    def test_log_level_normalised(self):
        """Should upper-case valid log levels."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Should reject unknown log levels."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"pcm_format": "f32le"},
            {"sample_rate": 44100},
            {"channels": 1},
        ],
    )
    def test_rejects_pcm_discord_cannot_play(self, overrides):
        """Should refuse audio settings the voice connection cannot play."""
        with pytest.raises(ValidationError, match="s16le 48000 Hz stereo"):
            Settings(_env_file=None, audio=AudioSettings(**overrides))

    def test_get_settings_is_cached(self):
        """Should return the same instance until the cache is cleared."""
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()
