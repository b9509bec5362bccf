"""
Shared fixtures for the jukebox test-suite.

Provides in-memory fakes for the voice transport and the acquisition
pipeline so the playback engine can be driven without Discord or
subprocesses.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import pytest
import pytest_asyncio

from discord_jukebox.application.interfaces.stream_acquirer import AudioStream, StreamAcquirer
from discord_jukebox.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from discord_jukebox.application.services.playback_engine import PlaybackEngine
from discord_jukebox.application.services.queue_store import QueueStore
from discord_jukebox.domain.music.entities import TrackRecord
from discord_jukebox.domain.shared.events import DomainEvent, EventBus
from discord_jukebox.domain.shared.exceptions import AcquisitionError

GUILD_ID = 111
CHANNEL_ID = 222


def make_track(
    track_id: str = "abc123",
    title: str | None = None,
    *,
    extractor: str = "youtube",
    duration: float | None = 180.0,
) -> TrackRecord:
    return TrackRecord(
        id=track_id,
        title=title or f"Song {track_id}",
        source_url=f"https://www.youtube.com/watch?v={track_id}",
        extractor=extractor,
        duration_seconds=duration,
    )


# =============================================================================
# Fakes
# =============================================================================


class FakeStream(AudioStream):
    def __init__(self, track: TrackRecord) -> None:
        self.track = track
        self.cleanup_calls = 0
        self.cleanup_threads: list[int] = []

    def read(self) -> bytes:
        return b""

    def cleanup(self) -> None:
        self.cleanup_calls += 1
        self.cleanup_threads.append(threading.get_ident())

    @property
    def closed(self) -> bool:
        return self.cleanup_calls > 0


class FakeAcquirer(StreamAcquirer):
    """Succeeds unless the track id is listed in ``failing``."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing if failing is not None else set()
        self.acquired: list[str] = []
        self.streams: list[FakeStream] = []

    async def acquire(self, track: TrackRecord) -> FakeStream:
        self.acquired.append(track.id)
        if track.id in self.failing:
            raise AcquisitionError(track.title, f"no media for {track.id}")
        stream = FakeStream(track)
        self.streams.append(stream)
        return stream


class FakeVoiceAdapter(VoiceAdapter):
    """Records every call; ``play`` returns ``accept_play``."""

    def __init__(self) -> None:
        self.connected: set[int] = set()
        self.connect_result = True
        self.accept_play = True
        self.played: list[tuple[int, AudioStream, int]] = []
        self.connect_calls: list[tuple[int, int]] = []
        self.disconnect_calls: list[int] = []
        self.stop_calls: list[int] = []
        self.callback: TrackEndCallback | None = None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        self.connect_calls.append((guild_id, channel_id))
        if self.connect_result:
            self.connected.add(guild_id)
        return self.connect_result

    async def disconnect(self, guild_id: int) -> bool:
        self.disconnect_calls.append(guild_id)
        self.connected.discard(guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.connected

    async def play(self, guild_id: int, stream: AudioStream, *, token: int) -> bool:
        if not self.accept_play:
            return False
        self.played.append((guild_id, stream, token))
        return True

    async def stop(self, guild_id: int) -> bool:
        self.stop_calls.append(guild_id)
        return True

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self.callback = callback

    @property
    def last_token(self) -> int:
        return self.played[-1][2]

    @property
    def played_ids(self) -> list[str]:
        return [stream.track.id for _, stream, _ in self.played]  # type: ignore[attr-defined]


class EventRecorder:
    """Subscribes to every given event type and keeps what was published."""

    def __init__(self, bus: EventBus, *event_types: type[DomainEvent]) -> None:
        self.events: list[DomainEvent] = []
        for event_type in event_types:
            bus.subscribe(event_type, self._record)

    async def _record(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        return [e for e in self.events if isinstance(e, event_type)]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def track_factory() -> Callable[..., TrackRecord]:
    """Factory for TrackRecord instances."""
    return make_track


@pytest.fixture
def sample_tracks() -> list[TrackRecord]:
    """Three distinct tracks."""
    return [make_track("a1"), make_track("b2"), make_track("c3")]


@pytest.fixture
def event_bus() -> EventBus:
    """Fresh event bus."""
    return EventBus()


@pytest.fixture
def queue_store() -> QueueStore:
    """Empty queue store."""
    return QueueStore()


@pytest.fixture
def voice() -> FakeVoiceAdapter:
    """Fake voice transport with no guilds connected."""
    return FakeVoiceAdapter()


@pytest.fixture
def acquirer() -> FakeAcquirer:
    """Fake acquirer that succeeds for every track."""
    return FakeAcquirer()


@pytest_asyncio.fixture
async def engine(queue_store, acquirer, voice, event_bus):
    """Playback engine wired to the fakes; workers are stopped afterwards."""
    engine = PlaybackEngine(
        queue_store=queue_store,
        stream_acquirer=acquirer,
        voice_adapter=voice,
        event_bus=event_bus,
    )
    yield engine
    await engine.shutdown()
