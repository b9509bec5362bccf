"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.music.value_objects import PcmFormat
from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    ChannelCount,
    CommandPrefixStr,
    NonEmptyStr,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    SampleRate,
)


def _validate_snowflake(value: int) -> int:
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: CommandPrefixStr = Field(
        default="~",
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = False
    # Pause after the bot joins on /play before the first track is handed over
    join_settle_seconds: NonNegativeFloat = 0.5

    @field_validator("test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            _validate_snowflake(snowflake)
        return v


class AudioSettings(BaseModel):
    """Media extraction and transcoding configuration.

    The transcoder can emit any of these formats; ``Settings`` narrows them
    to what a Discord voice connection plays.
    """

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    downloader_command: NonEmptyStr = Field(
        default="yt-dlp",
        validation_alias=AliasChoices("downloader_command", "ytdlp_command"),
    )
    transcoder_command: NonEmptyStr = Field(
        default="ffmpeg",
        validation_alias=AliasChoices("transcoder_command", "ffmpeg_command"),
    )
    ytdlp_format: NonEmptyStr = "webm[abr>0]/bestaudio/best"
    pcm_format: Literal["s16le", "f32le"] = "s16le"
    sample_rate: SampleRate = 48000
    channels: ChannelCount = 2
    ready_timeout_seconds: PositiveFloat = 30.0
    extract_timeout_seconds: PositiveFloat = 120.0
    cache_media: bool = False
    data_dir: NonEmptyStr = "data"

    @property
    def sample_format(self) -> PcmFormat:
        return PcmFormat(self.pcm_format)

    @property
    def cache_dir(self) -> Path:
        return Path(self.data_dir) / "cache"

    @property
    def media_cache_dir(self) -> Path:
        return self.cache_dir / "media"


class YouTubeSettings(BaseModel):
    """YouTube Data API configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("api_key", "youtube_token", "token"),
    )
    base_url: NonEmptyStr = "https://www.googleapis.com/youtube/v3"
    timeout_seconds: PositiveFloat = 10.0
    max_pages: PositiveInt = 20

    @property
    def enabled(self) -> bool:
        return bool(self.api_key.get_secret_value())


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX, etc. (nested with delimiter)
    - AUDIO__YTDLP_FORMAT, AUDIO__CACHE_MEDIA, ...
    - YOUTUBE__API_KEY
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper

    @model_validator(mode="after")
    def validate_voice_pcm(self) -> Settings:
        """Reject PCM layouts a Discord voice connection cannot play."""
        audio = self.audio
        if (audio.pcm_format, audio.sample_rate, audio.channels) != ("s16le", 48000, 2):
            raise ValueError(
                ErrorMessages.UNSUPPORTED_VOICE_PCM.format(
                    pcm_format=audio.pcm_format,
                    sample_rate=audio.sample_rate,
                    channels=audio.channels,
                )
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
