"""Port interface for voice transport operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .stream_acquirer import AudioStream

TrackEndCallback = Callable[[int, int], Awaitable[None]]
"""Called with ``(guild_id, token)`` after the stream handed over with *token* ends."""


class VoiceAdapter(ABC):
    """Interface for voice channel connection and audio output."""

    @abstractmethod
    async def connect(self, guild_id: int, channel_id: int) -> bool:
        """Connect to a voice channel."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: int) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: int) -> bool:
        ...

    @abstractmethod
    async def play(self, guild_id: int, stream: AudioStream, *, token: int) -> bool:
        """Replace current output with *stream*; *token* is echoed to the track-end callback."""
        ...

    @abstractmethod
    async def stop(self, guild_id: int) -> bool:
        """Stop current output."""
        ...

    @abstractmethod
    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        ...
