"""Port interfaces for producing live decoded audio streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import TrackRecord


class AudioStream(ABC):
    """A readable decoded-audio stream that owns the processes feeding it."""

    @abstractmethod
    def read(self) -> bytes:
        """Return the next frame, or ``b""`` once the stream is exhausted."""
        ...

    @abstractmethod
    def cleanup(self) -> None:
        """Release the stream and reap every child process. Idempotent."""
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...


class StreamAcquirer(ABC):
    """Interface for the acquisition pipeline."""

    @abstractmethod
    async def acquire(self, track: TrackRecord) -> AudioStream:
        """Start producing audio for *track*.

        Raises ``AcquisitionError`` when a stage cannot be started. A source
        that yields no media produces a stream that is exhausted right away.
        """
        ...
