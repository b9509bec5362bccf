"""StreamAcquirer that downloads each track once and decodes from disk afterwards."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from discord_jukebox.application.interfaces.stream_acquirer import StreamAcquirer
from discord_jukebox.domain.music.entities import TrackRecord
from discord_jukebox.domain.shared.exceptions import AcquisitionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.pcm_stream import PcmStream
from discord_jukebox.infrastructure.audio.pipeline import YtDlpFfmpegPipeline

logger = logging.getLogger(__name__)


class CachedStreamAcquirer(StreamAcquirer):
    """Media files live at ``<media_dir>/<extractor>/<id>``."""

    def __init__(self, pipeline: YtDlpFfmpegPipeline, media_dir: Path) -> None:
        self._pipeline = pipeline
        self._media_dir = media_dir

    def path_for(self, track: TrackRecord) -> Path:
        return self._media_dir / track.cache_key

    async def acquire(self, track: TrackRecord) -> PcmStream:
        path = self.path_for(track)
        if path.is_file():
            logger.info(LogTemplates.CACHE_HIT, track.title)
        else:
            logger.info(LogTemplates.CACHE_MISS, track.title)
            await self._download(track, path)
            if not path.is_file():
                raise AcquisitionError(
                    track.title, ErrorMessages.CACHED_MEDIA_MISSING.format(path=path)
                )

        return self._pipeline.open_file(track, path)

    async def _download(self, track: TrackRecord, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        command = self._pipeline.downloader_command(track.source_url, output=str(path))
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise AcquisitionError(
                track.title,
                ErrorMessages.DOWNLOADER_SPAWN_FAILED.format(command=command[0], error=exc),
            ) from exc

        returncode = await process.wait()
        if returncode:
            logger.debug(LogTemplates.EXTRACTOR_EXIT_CODE, command[0], returncode, track.source_url)
