"""Domain events and the in-process event bus that carries them."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
    UtcDatetimeField,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")
EventHandler = Callable[[T], Awaitable[None]]


class DomainEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: UtcDatetimeField = Field(default_factory=utcnow)


# === Queue Events ===


class TracksQueued(DomainEvent):
    guild_id: DiscordSnowflake
    count: NonNegativeInt = 0
    from_url: bool = False


class QueueExhausted(DomainEvent):
    guild_id: DiscordSnowflake


# === Playback Events ===


class TrackStartedPlaying(DomainEvent):
    guild_id: DiscordSnowflake
    track_id: NonEmptyStr
    track_title: str = ""
    source_url: str = ""
    duration_seconds: DurationSeconds | None = None


class TrackPlaybackFailed(DomainEvent):
    guild_id: DiscordSnowflake
    track_id: NonEmptyStr
    track_title: str = ""
    reason: str = ""


# === Session Events ===


class SessionDestroyed(DomainEvent):
    guild_id: DiscordSnowflake
    reason: str = ""


# === Event Bus ===


class EventBus:
    """In-memory pub/sub event bus for domain events.

    Handlers are called concurrently. Exceptions in handlers are logged
    but do not prevent other handlers from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler[Any]]] = defaultdict(list)

    def subscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed handler to: %s", event_type.__name__)

    def unsubscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            logger.debug("Unsubscribed handler from %s", event_type.__name__)

    async def publish(self, event: DomainEvent) -> None:
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug("No handlers for %s", event_type.__name__)
            return

        logger.debug("Publishing %s to %d handlers", event_type.__name__, len(handlers))

        async def safe_call(handler: EventHandler[Any]) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.exception("Error in handler for %s: %s", event_type.__name__, e)

        async with asyncio.TaskGroup() as tg:
            for handler in handlers:
                tg.create_task(safe_call(handler))

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
        logger.debug("Cleared all event handlers")
