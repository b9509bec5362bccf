"""Queue Application Service - resolves input, queues it, and starts idle sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.music.entities import TrackRecord
from ...domain.music.value_objects import AdvanceOutcome, UrlInput, parse_play_input
from ...domain.shared.events import TracksQueued
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.shared.events import EventBus
    from ..interfaces.metadata_resolver import MetadataResolver
    from .playback_engine import PlaybackEngine
    from .queue_store import QueueStore

logger = logging.getLogger(__name__)


class EnqueueResult(BaseModel):
    added: NonNegativeInt = 0
    from_url: bool = False
    started: bool = False
    outcome: AdvanceOutcome | None = None
    first_track: TrackRecord | None = None


class QueueService:
    """Entry point for ``/play``: turns raw text into queued tracks."""

    def __init__(
        self,
        *,
        queue_store: QueueStore,
        metadata_resolver: MetadataResolver,
        playback_engine: PlaybackEngine,
        event_bus: EventBus,
    ) -> None:
        self._store = queue_store
        self._resolver = metadata_resolver
        self._engine = playback_engine
        self._events = event_bus

    async def enqueue(self, guild_id: DiscordSnowflake, raw_input: str) -> EnqueueResult:
        """Resolve *raw_input*, append it to the guild's queue, and kick off playback.

        Resolution happens before the guild lock is taken, so a slow extractor
        never blocks the playback worker. Raises ``ResolutionError`` with the
        queue untouched, and ``ValueError`` for an empty query.
        """
        play_input = parse_play_input(raw_input)
        from_url = isinstance(play_input, UrlInput)
        logger.debug(LogTemplates.RESOLVE_STARTED, raw_input, guild_id)

        tracks = await self._resolver.resolve(play_input)

        async with self._store.lock(guild_id):
            added = self._store.add(guild_id, tracks, from_url=from_url)
            playing = self._store.is_playing(guild_id)

        await self._events.publish(TracksQueued(guild_id=guild_id, count=added, from_url=from_url))

        result = EnqueueResult(
            added=added,
            from_url=from_url,
            first_track=tracks[0] if added else None,
        )
        if playing:
            return result

        outcome = await self._engine.advance(guild_id)
        return result.model_copy(update={"started": True, "outcome": outcome})

    def pending(self, guild_id: DiscordSnowflake) -> list[TrackRecord]:
        """Tracks still waiting to be played, head first."""
        return self._store.items(guild_id)
