"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue store, engine, resolvers, and
Discord adapters. Components are created on first access and cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.metadata_resolver import MetadataResolver
    from ..application.interfaces.stream_acquirer import StreamAcquirer
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.playback_engine import PlaybackEngine
    from ..application.services.queue_service import QueueService
    from ..application.services.queue_store import QueueStore
    from ..domain.shared.events import EventBus
    from ..infrastructure.discord.services.channel_notifier import ChannelNotifier
    from ..infrastructure.youtube.api_client import YouTubeApiClient
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. Anything that
    talks to Discord needs :meth:`set_bot` to have been called first.
    """

    settings: Settings
    _bot: Bot | None = None

    # Shared state
    _event_bus: EventBus | None = None
    _queue_store: QueueStore | None = None

    # Infrastructure adapters
    _youtube_client: YouTubeApiClient | None = None
    _metadata_resolver: MetadataResolver | None = None
    _stream_acquirer: StreamAcquirer | None = None
    _voice_adapter: VoiceAdapter | None = None

    # Application services
    _playback_engine: PlaybackEngine | None = None
    _queue_service: QueueService | None = None

    # Event subscribers
    _channel_notifier: ChannelNotifier | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Shared state ===

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    @property
    def queue_store(self) -> QueueStore:
        if self._queue_store is None:
            from ..application.services.queue_store import QueueStore

            self._queue_store = QueueStore()
        return self._queue_store

    # === Adapters ===

    @property
    def youtube_client(self) -> YouTubeApiClient:
        if self._youtube_client is None:
            from ..infrastructure.youtube.api_client import YouTubeApiClient

            self._youtube_client = YouTubeApiClient(self.settings.youtube)
        return self._youtube_client

    @property
    def metadata_resolver(self) -> MetadataResolver:
        if self._metadata_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpMetadataResolver

            self._metadata_resolver = YtDlpMetadataResolver(
                self.settings.audio, youtube_client=self.youtube_client
            )
        return self._metadata_resolver

    @property
    def stream_acquirer(self) -> StreamAcquirer:
        """The yt-dlp to ffmpeg pipeline, behind the media cache when enabled."""
        if self._stream_acquirer is None:
            from ..infrastructure.audio.media_cache import CachedStreamAcquirer
            from ..infrastructure.audio.pipeline import YtDlpFfmpegPipeline

            audio = self.settings.audio
            pipeline = YtDlpFfmpegPipeline(audio)
            if audio.cache_media:
                self._stream_acquirer = CachedStreamAcquirer(pipeline, audio.media_cache_dir)
            else:
                self._stream_acquirer = pipeline
        return self._stream_acquirer

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot)
        return self._voice_adapter

    # === Application services ===

    @property
    def playback_engine(self) -> PlaybackEngine:
        if self._playback_engine is None:
            from ..application.services.playback_engine import PlaybackEngine

            self._playback_engine = PlaybackEngine(
                queue_store=self.queue_store,
                stream_acquirer=self.stream_acquirer,
                voice_adapter=self.voice_adapter,
                event_bus=self.event_bus,
            )
        return self._playback_engine

    @property
    def queue_service(self) -> QueueService:
        if self._queue_service is None:
            from ..application.services.queue_service import QueueService

            self._queue_service = QueueService(
                queue_store=self.queue_store,
                metadata_resolver=self.metadata_resolver,
                playback_engine=self.playback_engine,
                event_bus=self.event_bus,
            )
        return self._queue_service

    @property
    def channel_notifier(self) -> ChannelNotifier:
        if self._channel_notifier is None:
            from ..infrastructure.discord.services.channel_notifier import ChannelNotifier

            self._channel_notifier = ChannelNotifier(self.bot, self.event_bus)
        return self._channel_notifier

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Wire the engine to the voice adapter and start event subscribers."""
        _ = self.playback_engine
        self.channel_notifier.start()

    async def shutdown(self) -> None:
        """Stop workers, reap streams, and close HTTP clients."""
        if self._channel_notifier is not None:
            self._channel_notifier.stop()

        if self._playback_engine is not None:
            await self._playback_engine.shutdown()

        if self._youtube_client is not None:
            await self._youtube_client.aclose()

        if self._event_bus is not None:
            self._event_bus.clear()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
