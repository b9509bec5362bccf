"""StreamAcquirer implementation piping yt-dlp into ffmpeg."""

from __future__ import annotations

import asyncio
import logging
import subprocess
import threading
from pathlib import Path
from typing import IO, Final

import discord

from discord_jukebox.application.interfaces.stream_acquirer import StreamAcquirer
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import TrackRecord
from discord_jukebox.domain.shared.exceptions import AcquisitionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.pcm_stream import PcmStream, reap, transcoder_args

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE: Final[int] = 64 * 1024


def _drain(pipe: IO[bytes]) -> None:
    """Read and discard until EOF so the writer never blocks on a full pipe."""
    with pipe:
        while pipe.read(DRAIN_CHUNK_SIZE):
            pass


def _discard_downloader(downloader: subprocess.Popen[bytes]) -> None:
    """Reap a downloader that never got a transcoder, then close its pipes."""
    reap("downloader", downloader)
    for pipe in (downloader.stdout, downloader.stderr):
        if pipe is not None:
            pipe.close()


class YtDlpFfmpegPipeline(StreamAcquirer):
    """Downloads a track with yt-dlp and decodes it to raw PCM with ffmpeg.

    The downloader writes media to its stdout, which becomes the transcoder's
    stdin. The transcoder is only started once the downloader has written its
    first line to stderr (the ``--print-json`` record), so a downloader that
    cannot even start is detected before ffmpeg is spawned.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

    def downloader_command(self, url: str, output: str = "-") -> list[str]:
        return [
            self._settings.downloader_command,
            "--print-json",
            "-f",
            self._settings.ytdlp_format,
            "-R",
            "infinite",
            "--no-playlist",
            "--ignore-config",
            "--no-warnings",
            url,
            "-o",
            output,
        ]

    def transcoder_command(self, source: str = "-") -> list[str]:
        return [
            self._settings.transcoder_command,
            *transcoder_args(
                source,
                self._settings.sample_format,
                self._settings.sample_rate,
                self._settings.channels,
            ),
        ]

    async def acquire(self, track: TrackRecord) -> PcmStream:
        logger.info(LogTemplates.ACQUIRE_STARTED, track.title, track.source_url)

        command = self.downloader_command(track.source_url)
        try:
            downloader = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning(LogTemplates.ACQUIRE_FAILED, track.title, exc)
            raise AcquisitionError(
                track.title,
                ErrorMessages.DOWNLOADER_SPAWN_FAILED.format(command=command[0], error=exc),
            ) from exc

        assert downloader.stdout is not None and downloader.stderr is not None

        try:
            await self._wait_until_ready(downloader, track)
        except AcquisitionError:
            # The readline worker only returns once the downloader is dead.
            await asyncio.to_thread(_discard_downloader, downloader)
            raise

        threading.Thread(
            target=_drain,
            args=(downloader.stderr,),
            name=f"ytdlp-stderr-{downloader.pid}",
            daemon=True,
        ).start()

        try:
            stream = self._open(track, "-", stdin=downloader.stdout, upstream=downloader)
        except AcquisitionError:
            await asyncio.to_thread(reap, "downloader", downloader)
            raise
        finally:
            # ffmpeg holds its own copy now.
            downloader.stdout.close()

        logger.info(LogTemplates.ACQUIRE_DONE, track.title, stream.pids)
        return stream

    def open_file(self, track: TrackRecord, path: Path) -> PcmStream:
        """Decode an already downloaded media file."""
        stream = self._open(track, str(path))
        logger.info(LogTemplates.ACQUIRE_DONE, track.title, stream.pids)
        return stream

    async def _wait_until_ready(
        self, downloader: subprocess.Popen[bytes], track: TrackRecord
    ) -> None:
        assert downloader.stderr is not None
        timeout = self._settings.ready_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                line = await asyncio.to_thread(downloader.stderr.readline)
        except TimeoutError as exc:
            logger.warning(LogTemplates.ACQUIRE_FAILED, track.title, "not ready")
            raise AcquisitionError(
                track.title, ErrorMessages.DOWNLOADER_NOT_READY.format(timeout=timeout)
            ) from exc

        if line:
            logger.debug(LogTemplates.ACQUIRE_READY, track.title)
        else:
            # Early exit: the stream will simply come out empty.
            logger.debug(LogTemplates.ACQUIRE_DOWNLOADER_EOF, track.title)

    def _open(
        self,
        track: TrackRecord,
        source: str,
        *,
        stdin: IO[bytes] | int = subprocess.DEVNULL,
        upstream: subprocess.Popen[bytes] | None = None,
    ) -> PcmStream:
        executable = self._settings.transcoder_command
        try:
            return PcmStream(
                source,
                executable=executable,
                stdin=stdin,
                upstream=upstream,
                sample_format=self._settings.sample_format,
                sample_rate=self._settings.sample_rate,
                channels=self._settings.channels,
            )
        except (discord.ClientException, OSError) as exc:
            logger.warning(LogTemplates.ACQUIRE_FAILED, track.title, exc)
            raise AcquisitionError(
                track.title,
                ErrorMessages.TRANSCODER_SPAWN_FAILED.format(command=executable, error=exc),
            ) from exc
