"""Process-wide, lock-guarded store of per-guild queues."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ...domain.music.entities import SessionQueue, TrackRecord
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class QueueStore:
    """Maps guild ids to their :class:`SessionQueue`.

    Every method is synchronous and therefore atomic on the event loop.
    Sequences that span an ``await`` (consume, then acquire, then hand over)
    must run inside ``async with store.lock(guild_id):`` so that no other
    mutation for that guild interleaves.

    Entries are created on the first add and are only removed by
    :meth:`discard`. An empty, not-playing entry is harmless.
    """

    def __init__(self) -> None:
        self._queues: dict[int, SessionQueue] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def lock(self, guild_id: int) -> asyncio.Lock:
        """Exclusive section for one guild; other guilds are unaffected."""
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = self._locks[guild_id] = asyncio.Lock()
        return lock

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._queues

    def add(self, guild_id: int, tracks: Sequence[TrackRecord], *, from_url: bool) -> int:
        """Append resolved tracks and return how many were queued.

        Input resolved from a URL is queued in full, in order. A search only
        ever queues its first result, so the return value is 0 or 1.
        """
        if from_url:
            queue = self._queues.setdefault(guild_id, SessionQueue())
            added = queue.extend(tracks)
        elif tracks:
            queue = self._queues.setdefault(guild_id, SessionQueue())
            added = queue.extend(tracks[:1])
        else:
            added = 0

        logger.info(LogTemplates.QUEUE_ADDED, added, guild_id, from_url)
        return added

    def consume(self, guild_id: int) -> TrackRecord | None:
        """Remove and return the head track, or None when there is nothing queued."""
        queue = self._queues.get(guild_id)
        if queue is None:
            return None

        track = queue.pop_front()
        if track is not None:
            logger.debug(LogTemplates.QUEUE_CONSUMED, track.title, guild_id, queue.length)
        return track

    def clear(self, guild_id: int) -> bool:
        """Empty the guild's queue; False if the guild never had one."""
        queue = self._queues.get(guild_id)
        if queue is None:
            return False

        count = queue.clear()
        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return True

    def set_status(self, guild_id: int, playing: bool) -> None:
        queue = self._queues.setdefault(guild_id, SessionQueue())
        queue.playing = playing
        logger.debug(LogTemplates.QUEUE_STATUS_SET, guild_id, playing)

    def is_playing(self, guild_id: int) -> bool:
        queue = self._queues.get(guild_id)
        return queue is not None and queue.playing

    def items(self, guild_id: int) -> list[TrackRecord]:
        """Snapshot of the queued tracks, head first."""
        queue = self._queues.get(guild_id)
        return list(queue.items) if queue is not None else []

    def discard(self, guild_id: int) -> bool:
        """Drop the guild's entry entirely (explicit teardown)."""
        removed = self._queues.pop(guild_id, None) is not None
        lock = self._locks.get(guild_id)
        if lock is not None and not lock.locked():
            self._locks.pop(guild_id, None)
        if removed:
            logger.debug(LogTemplates.QUEUE_DISCARDED, guild_id)
        return removed
