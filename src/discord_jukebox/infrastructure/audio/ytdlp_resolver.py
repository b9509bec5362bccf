"""MetadataResolver implementation backed by the YouTube Data API and the yt-dlp CLI."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from discord_jukebox.application.interfaces.metadata_resolver import MetadataResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import TrackRecord
from discord_jukebox.domain.music.value_objects import (
    GenericSource,
    NativePlaylist,
    NativeVideo,
    PlayInput,
    SearchInput,
    UrlInput,
    classify_source,
)
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.youtube.api_client import YouTubeApiClient

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final[int] = 500


# ── Pydantic model for one line of ``yt-dlp -j`` output ────────────────


class YtDlpEntry(BaseModel):
    """One JSON object printed by yt-dlp.

    Extra fields are ignored; garbage in the optional fields becomes None
    rather than failing the whole line.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str
    extractor: str
    webpage_url: str | None = None
    original_url: str | None = None
    thumbnail: str | None = None
    duration: float | None = None
    playlist_id: str | None = None
    is_live: bool | None = None
    was_live: bool | None = None

    @field_validator("id", "title", "extractor", mode="before")
    @classmethod
    def _require_text(cls, v: Any) -> str:
        if isinstance(v, int | float) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("expected a non-empty string")
        return v

    @field_validator(
        "webpage_url", "original_url", "thumbnail", "playlist_id", mode="before"
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float | None:
        """Coerce to non-negative float; return None for garbage values."""
        if v is None or isinstance(v, bool):
            return None
        try:
            val = float(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None

    @field_validator("is_live", "was_live", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool | None:
        return v if isinstance(v, bool) else None

    @property
    def source_url(self) -> str | None:
        return self.webpage_url or self.original_url

    def to_record(self) -> TrackRecord | None:
        url = self.source_url
        if not url:
            return None
        return TrackRecord(
            id=self.id,
            title=self.title[:MAX_TITLE_LENGTH],
            source_url=url,
            extractor=self.extractor,
            thumbnail=self.thumbnail,
            duration_seconds=self.duration,
            playlist_id=self.playlist_id,
            webpage_url=self.webpage_url,
            is_live=self.is_live,
            was_live=self.was_live,
        )


def parse_extractor_output(stdout: bytes) -> list[TrackRecord]:
    """Parse newline-delimited yt-dlp JSON, dropping lines that do not parse."""
    records: list[TrackRecord] = []
    for raw_line in stdout.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        try:
            entry = YtDlpEntry.model_validate(json.loads(line))
        except (ValueError, ValidationError):
            logger.debug(LogTemplates.EXTRACTOR_LINE_DROPPED, len(line))
            continue

        record = entry.to_record()
        if record is None:
            logger.debug(LogTemplates.EXTRACTOR_LINE_DROPPED, len(line))
            continue
        records.append(record)
    return records


class YtDlpMetadataResolver(MetadataResolver):
    """Routes native YouTube links to the Data API and everything else to yt-dlp."""

    def __init__(
        self,
        settings: AudioSettings | None = None,
        youtube_client: YouTubeApiClient | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._youtube = youtube_client

    def build_command(self, target: str) -> list[str]:
        return [
            self._settings.downloader_command,
            "-j",
            "-f",
            self._settings.ytdlp_format,
            "-R",
            "infinite",
            "--yes-playlist",
            "--ignore-config",
            "--no-warnings",
            target,
        ]

    async def resolve(self, play_input: PlayInput) -> list[TrackRecord]:
        match play_input:
            case SearchInput():
                records = await self._extract(play_input.extractor_target)
            case UrlInput(url=url):
                records = await self._resolve_url(url)

        logger.info(LogTemplates.RESOLVE_DONE, len(records), play_input)
        return records

    async def _resolve_url(self, url: str) -> list[TrackRecord]:
        source = classify_source(url)
        if isinstance(source, NativeVideo | NativePlaylist) and not self._api_available:
            logger.info(LogTemplates.RESOLVE_NO_API_KEY, self._settings.downloader_command, url)
            source = GenericSource(url)

        match source:
            case NativeVideo(video_id=video_id):
                assert self._youtube is not None
                logger.debug(LogTemplates.RESOLVE_NATIVE_VIDEO, video_id)
                return await self._youtube.fetch_video(video_id)
            case NativePlaylist(playlist_id=playlist_id):
                assert self._youtube is not None
                logger.debug(LogTemplates.RESOLVE_NATIVE_PLAYLIST, playlist_id)
                return await self._youtube.fetch_playlist(playlist_id)
            case GenericSource(url=target):
                return await self._extract(target)

    @property
    def _api_available(self) -> bool:
        return self._youtube is not None and self._youtube.enabled

    async def _extract(self, target: str) -> list[TrackRecord]:
        command = self.build_command(target)
        logger.debug(LogTemplates.RESOLVE_GENERIC, target, command[0])

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ResolutionError(
                target, ErrorMessages.EXTRACTOR_SPAWN_FAILED.format(command=command[0], error=exc)
            ) from exc

        try:
            async with asyncio.timeout(self._settings.extract_timeout_seconds):
                stdout, _ = await process.communicate()
        except TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ResolutionError(
                target,
                ErrorMessages.EXTRACTOR_TIMED_OUT.format(
                    command=command[0], timeout=self._settings.extract_timeout_seconds
                ),
            ) from exc

        if process.returncode:
            logger.debug(LogTemplates.EXTRACTOR_EXIT_CODE, command[0], process.returncode, target)

        return parse_extractor_output(stdout)
