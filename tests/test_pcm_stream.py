"""Tests for PcmStream framing and process reaping."""

import io
import os
import subprocess
import threading
import time
from unittest.mock import MagicMock, patch

import discord
import pytest

from discord_jukebox.domain.music.value_objects import PcmFormat
from discord_jukebox.infrastructure.audio.pcm_stream import PcmStream, frame_size, reap

FRAME = 3840
POPEN = "discord.player.subprocess.Popen"


def _process(pid: int, *, running: bool = True, stdout=None) -> MagicMock:
    process = MagicMock()
    process.pid = pid
    process.stdout = stdout if stdout is not None else io.BytesIO()
    process.poll.return_value = None if running else 0
    process.wait.return_value = 0
    return process


def _stream(transcoder: MagicMock, **kwargs) -> PcmStream:
    with patch(POPEN, return_value=transcoder):
        return PcmStream("-", **kwargs)


@pytest.mark.parametrize(
    ("rate", "channels", "fmt", "expected"),
    [
        (48000, 2, PcmFormat.S16LE, 3840),
        (48000, 2, PcmFormat.F32LE, 7680),
        (16000, 1, PcmFormat.S16LE, 640),
    ],
)
def test_frame_size(rate, channels, fmt, expected):
    """Should size frames at 20 ms of audio."""
    assert frame_size(rate, channels, fmt) == expected


class TestSpawn:
    """Tests for starting ffmpeg through discord.py."""

    def test_spawns_ffmpeg_with_pcm_arguments(self):
        """Should run the configured executable against the given source."""
        stdin = MagicMock()
        with patch(POPEN, return_value=_process(20)) as popen:
            PcmStream("-", executable="/opt/ffmpeg", stdin=stdin)

        command = popen.call_args.args[0]
        assert command[:3] == ["/opt/ffmpeg", "-i", "-"]
        assert command[command.index("-f") + 1] == "s16le"
        assert command[-1] == "pipe:1"
        assert popen.call_args.kwargs["stdin"] is stdin
        assert popen.call_args.kwargs["stdout"] == subprocess.PIPE

    def test_missing_executable(self):
        """Should surface discord.py's ClientException when ffmpeg is missing."""
        with patch(POPEN, side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(discord.ClientException):
                PcmStream("-")


class TestRead:
    """Tests for reading frames."""

    def test_reads_whole_frames_then_ends(self):
        """Should return full frames and treat a short tail as the end."""
        data = b"\x01" * FRAME * 2 + b"\x02" * 10
        stream = _stream(_process(20, stdout=io.BytesIO(data)))

        assert stream.read() == b"\x01" * FRAME
        assert stream.read() == b"\x01" * FRAME
        assert stream.read() == b""
        assert stream.frames_read == 2

    def test_closed_stream_reads_nothing(self):
        """Should return b'' after cleanup."""
        stream = _stream(_process(20, stdout=io.BytesIO(b"\x00" * FRAME)))
        stream.cleanup()

        assert stream.read() == b""
        assert stream.closed

    def test_is_discord_ffmpeg_source(self):
        """Should be playable by a discord.py voice client."""
        stream = _stream(_process(20))
        assert isinstance(stream, discord.FFmpegAudio)
        assert stream.is_opus() is False
        assert stream.sample_format is PcmFormat.S16LE
        assert stream.frame_size == FRAME


class TestCleanup:
    """Tests for reaping the processes behind a stream."""

    def test_kills_transcoder_and_downloader(self):
        """Should kill ffmpeg, then reap the downloader feeding it."""
        downloader, transcoder = _process(10), _process(20)
        stream = _stream(transcoder, upstream=downloader)

        stream.cleanup()

        assert stream.pids == [10, 20]
        transcoder.kill.assert_called_once()
        downloader.kill.assert_called_once()
        downloader.wait.assert_called_once()
        assert transcoder.stdout.closed

    def test_is_idempotent(self):
        """Should only reap once however often it is called."""
        downloader, transcoder = _process(10), _process(20)
        stream = _stream(transcoder, upstream=downloader)

        stream.cleanup()
        stream.cleanup()

        transcoder.kill.assert_called_once()
        downloader.kill.assert_called_once()

    def test_cleanup_unblocks_pending_read(self):
        """Should finish while the player thread is blocked reading silent ffmpeg output."""
        read_fd, write_fd = os.pipe()
        transcoder = _process(20, stdout=os.fdopen(read_fd, "rb"))
        # A killed process closes its end of the pipe.
        transcoder.kill.side_effect = lambda: os.close(write_fd)
        stream = _stream(transcoder)

        results: list[bytes] = []
        reader = threading.Thread(target=lambda: results.append(stream.read()), daemon=True)
        reader.start()
        time.sleep(0.1)

        cleaner = threading.Thread(target=stream.cleanup, daemon=True)
        cleaner.start()
        cleaner.join(timeout=3)
        reader.join(timeout=3)

        assert not cleaner.is_alive()
        assert results == [b""]


class TestReap:
    """Tests for the blocking reap helper."""

    def test_exited_process_is_not_killed(self):
        """Should just wait for processes that already exited."""
        process = _process(1, running=False)

        reap("downloader", process)

        process.kill.assert_not_called()
        process.wait.assert_called_once()

    def test_reap_failure_is_logged(self, caplog):
        """Should log instead of raising when a process will not die."""
        stuck = _process(1)
        stuck.wait.side_effect = subprocess.TimeoutExpired("yt-dlp", 5)

        reap("downloader", stuck)

        assert any("Failed to reap" in r.getMessage() for r in caplog.records)
