"""Core domain entities for the music bounded context."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    TrackTitleStr,
)


class TrackRecord(BaseModel):
    """Immutable canonical metadata for one playable item."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    title: TrackTitleStr
    source_url: NonEmptyStr
    extractor: NonEmptyStr

    thumbnail: str | None = None
    duration_seconds: DurationSeconds | None = None
    playlist_id: str | None = None
    webpage_url: str | None = None
    is_live: bool | None = None
    was_live: bool | None = None

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(int(self.duration_seconds), 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_title(self) -> str:
        """Get display title with duration if available."""
        if self.duration_seconds:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title

    @property
    def cache_key(self) -> str:
        """Relative path of this track inside the media cache."""
        return f"{self.extractor}/{self.id}"


class SessionQueue(BaseModel):
    """Ordered tracks and playing flag for a single guild."""

    model_config = ConfigDict(strict=True)

    items: list[TrackRecord] = Field(default_factory=list)
    playing: bool = False

    @property
    def length(self) -> NonNegativeInt:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def extend(self, tracks: Iterable[TrackRecord]) -> int:
        """Append tracks at the tail in order and return how many were added."""
        before = len(self.items)
        self.items.extend(tracks)
        return len(self.items) - before

    def pop_front(self) -> TrackRecord | None:
        if not self.items:
            return None
        return self.items.pop(0)

    def clear(self) -> int:
        """Remove all tracks and return the count removed."""
        count = len(self.items)
        self.items.clear()
        return count
