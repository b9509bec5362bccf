"""
Music Bounded Context

Track records, per-guild queues, and the closed variants for user input
and media sources.
"""

from discord_jukebox.domain.music.entities import SessionQueue, TrackRecord
from discord_jukebox.domain.music.value_objects import (
    AdvanceOutcome,
    AdvanceReason,
    GenericSource,
    MediaSource,
    NativePlaylist,
    NativeVideo,
    PcmFormat,
    PlaybackState,
    PlayInput,
    SearchInput,
    SkipOutcome,
    TeardownReason,
    UrlInput,
    classify_source,
    parse_play_input,
    youtube_watch_url,
)

__all__ = [
    # Entities
    "TrackRecord",
    "SessionQueue",
    # Value Objects
    "UrlInput",
    "SearchInput",
    "PlayInput",
    "NativeVideo",
    "NativePlaylist",
    "GenericSource",
    "MediaSource",
    "PlaybackState",
    "AdvanceReason",
    "AdvanceOutcome",
    "SkipOutcome",
    "TeardownReason",
    "PcmFormat",
    # Helpers
    "parse_play_input",
    "classify_source",
    "youtube_watch_url",
]
