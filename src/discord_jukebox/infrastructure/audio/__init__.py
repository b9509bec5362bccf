"""Audio infrastructure - yt-dlp metadata, the yt-dlp to ffmpeg pipeline, and the media cache."""

from discord_jukebox.infrastructure.audio.media_cache import CachedStreamAcquirer
from discord_jukebox.infrastructure.audio.pcm_stream import PcmStream
from discord_jukebox.infrastructure.audio.pipeline import YtDlpFfmpegPipeline
from discord_jukebox.infrastructure.audio.ytdlp_resolver import (
    YtDlpEntry,
    YtDlpMetadataResolver,
    parse_extractor_output,
)

__all__ = [
    "CachedStreamAcquirer",
    "PcmStream",
    "YtDlpEntry",
    "YtDlpFfmpegPipeline",
    "YtDlpMetadataResolver",
    "parse_extractor_output",
]
