"""
PCM Stream

discord.py FFmpeg audio source that decodes a download to raw PCM and also
owns the downloader process feeding it.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from typing import IO, Final

import discord

from discord_jukebox.application.interfaces.stream_acquirer import AudioStream
from discord_jukebox.domain.music.value_objects import PcmFormat
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

FRAME_MILLISECONDS: Final[int] = 20
REAP_TIMEOUT_SECONDS: Final[float] = 5.0


def frame_size(sample_rate: int, channels: int, sample_format: PcmFormat) -> int:
    """Bytes in one 20 ms frame of raw PCM."""
    return sample_rate * channels * sample_format.sample_width * FRAME_MILLISECONDS // 1000


def transcoder_args(
    source: str, sample_format: PcmFormat, sample_rate: int, channels: int
) -> list[str]:
    """ffmpeg arguments (without the executable) decoding *source* to PCM on stdout."""
    return [
        "-i",
        source,
        "-f",
        sample_format.value,
        "-ac",
        str(channels),
        "-ar",
        str(sample_rate),
        "-acodec",
        sample_format.codec,
        "-loglevel",
        "warning",
        "pipe:1",
    ]


def reap(name: str, process: subprocess.Popen[bytes]) -> None:
    """Kill *process* if it is still running and wait for it. Blocking."""
    try:
        if process.poll() is None:
            process.kill()
        returncode = process.wait(timeout=REAP_TIMEOUT_SECONDS)
        logger.debug(LogTemplates.STREAM_REAPED, name, process.pid, returncode)
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.warning(LogTemplates.STREAM_REAP_FAILED, process.pid, exc)


class PcmStream(discord.FFmpegAudio, AudioStream):
    """Raw PCM read from ffmpeg, playable by a voice client.

    ffmpeg is spawned by :class:`discord.FFmpegAudio`; ``source`` is either a
    file path or ``"-"`` with ``stdin`` set to the downloader's stdout. The
    downloader (``upstream``) is reaped after ffmpeg on ``cleanup()``, which
    runs when the player finishes, on early discard, and on teardown, and is
    safe to call from any thread any number of times.
    """

    def __init__(
        self,
        source: str,
        *,
        executable: str = "ffmpeg",
        stdin: IO[bytes] | int = subprocess.DEVNULL,
        upstream: subprocess.Popen[bytes] | None = None,
        sample_format: PcmFormat = PcmFormat.S16LE,
        sample_rate: int = 48000,
        channels: int = 2,
    ) -> None:
        """Spawn ffmpeg.

        Args:
            source: Media path, or ``"-"`` to decode from ``stdin``.
            executable: ffmpeg command.
            stdin: Pipe or file descriptor ffmpeg reads when ``source`` is ``"-"``.
            upstream: Process writing into ``stdin``; reaped with the stream.
            sample_format: PCM encoding to emit.
            sample_rate: Samples per second per channel.
            channels: Interleaved channel count.

        Raises:
            discord.ClientException: ffmpeg could not be started.
        """
        # Set before spawning: a failed spawn still reaches cleanup() via __del__.
        self._lock = threading.Lock()
        self._closed = False
        self._upstream: subprocess.Popen[bytes] | None = None
        self._pcm: IO[bytes] | None = None
        self._sample_format = sample_format
        self._frame_size = frame_size(sample_rate, channels, sample_format)
        self._frames = 0

        super().__init__(
            source,
            executable=executable,
            args=transcoder_args(source, sample_format, sample_rate, channels),
            stdin=stdin,
        )
        self._transcoder: subprocess.Popen[bytes] = self._process
        self._pcm = self._stdout
        self._upstream = upstream

    @property
    def sample_format(self) -> PcmFormat:
        return self._sample_format

    @property
    def frame_size(self) -> int:
        return self._frame_size

    @property
    def frames_read(self) -> int:
        return self._frames

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pids(self) -> list[int]:
        processes = [self._upstream, self._transcoder]
        return [process.pid for process in processes if process is not None]

    def read(self) -> bytes:
        if self._closed or self._pcm is None:
            return b""

        try:
            data = self._pcm.read(self._frame_size)
        except (OSError, ValueError):
            # Pipe closed underneath us by a concurrent cleanup.
            return b""

        if len(data) < self._frame_size:
            logger.debug(LogTemplates.STREAM_EXHAUSTED, self._frames)
            return b""

        self._frames += 1
        return data

    def is_opus(self) -> bool:
        return False

    def cleanup(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True

        # Kill before closing: a read blocked in the player thread holds the
        # pipe's lock until the process dies and the pipe reports EOF.
        super().cleanup()
        if self._upstream is not None:
            reap("downloader", self._upstream)

        if self._pcm is not None:
            try:
                self._pcm.close()
            except OSError:
                pass
