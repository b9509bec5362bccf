"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final
from urllib.parse import parse_qsl, urlsplit

from discord_jukebox.domain.shared.messages import ErrorMessages

YOUTUBE_WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_HOSTS: Final[tuple[str, ...]] = ("youtube.com", "youtu.be")
SEARCH_PREFIX: Final[str] = "ytsearch1:"


# ── User input ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class UrlInput:
    """A play request given as a link."""

    url: str


@dataclass(frozen=True)
class SearchInput:
    """A play request given as free text; only the top match is used."""

    query: str

    def __post_init__(self) -> None:
        if not self.query or not self.query.strip():
            raise ValueError(ErrorMessages.EMPTY_SEARCH_QUERY)

    @property
    def extractor_target(self) -> str:
        return f"{SEARCH_PREFIX}{self.query}"


PlayInput = UrlInput | SearchInput


def parse_play_input(raw: str) -> PlayInput:
    """Tag raw command text as a URL or a search query."""
    text = raw.strip()
    parts = urlsplit(text)
    if parts.scheme in ("http", "https") and parts.netloc:
        return UrlInput(text)
    return SearchInput(text)


# ── Media sources ───────────────────────────────────────────────────


@dataclass(frozen=True)
class NativeVideo:
    video_id: str


@dataclass(frozen=True)
class NativePlaylist:
    playlist_id: str


@dataclass(frozen=True)
class GenericSource:
    url: str


MediaSource = NativeVideo | NativePlaylist | GenericSource


def _first_query_values(query: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for key, value in parse_qsl(query):
        values.setdefault(key, value)
    return values


def classify_source(url: str) -> MediaSource:
    """Decide which resolver handles a URL.

    A YouTube link with a ``list`` parameter is a playlist even when it also
    carries ``v``.
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    if not host.endswith(YOUTUBE_HOSTS):
        return GenericSource(url)

    query = _first_query_values(parts.query)
    if "list" in query:
        return NativePlaylist(query["list"])
    if "v" in query:
        return NativeVideo(query["v"])
    return GenericSource(url)


def youtube_watch_url(video_id: str) -> str:
    return YOUTUBE_WATCH_URL.format(video_id=video_id)


# ── Playback state ──────────────────────────────────────────────────


class PlaybackState(Enum):
    """Per-session engine state.

    - IDLE -> ACQUIRING (a track was consumed)
    - ACQUIRING -> PLAYING (stream handed to the voice connection)
    - ACQUIRING -> ACQUIRING (acquisition failed, next track consumed)
    - ACQUIRING -> IDLE (queue exhausted)
    - PLAYING -> ACQUIRING (track ended or skipped)
    - Any -> IDLE (teardown)
    """

    IDLE = "idle"
    ACQUIRING = "acquiring"
    PLAYING = "playing"

    @property
    def is_active(self) -> bool:
        return self is not PlaybackState.IDLE


class AdvanceReason(Enum):
    """Why the engine was asked to move to the next track."""

    ENQUEUED = "enqueued"
    SKIPPED = "skipped"
    TRACK_ENDED = "track_ended"


class AdvanceOutcome(Enum):
    PLAYING = "playing"
    EXHAUSTED = "exhausted"


class SkipOutcome(Enum):
    SKIPPED = "skipped"
    QUEUE_ENDED = "queue_ended"
    NOTHING_PLAYING = "nothing_playing"


class PcmFormat(Enum):
    """Raw PCM sample formats the transcoder can emit."""

    S16LE = "s16le"
    F32LE = "f32le"

    @property
    def codec(self) -> str:
        return f"pcm_{self.value}"

    @property
    def sample_width(self) -> int:
        return 2 if self is PcmFormat.S16LE else 4


class TeardownReason(Enum):
    LEAVE = "leave"
    QUEUE_EXHAUSTED = "queue_exhausted"
    VOICE_LOST = "voice_lost"
