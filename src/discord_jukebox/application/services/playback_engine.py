"""Playback continuation engine: consume, acquire, play, retry, or tear down."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import (
    AdvanceOutcome,
    AdvanceReason,
    PlaybackState,
    SkipOutcome,
    TeardownReason,
)
from ...domain.shared.events import (
    QueueExhausted,
    SessionDestroyed,
    TrackPlaybackFailed,
    TrackStartedPlaying,
)
from ...domain.shared.exceptions import (
    AcquisitionError,
    AlreadyConnectedError,
    DomainError,
    NotConnectedError,
    VoiceConnectionError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import TrackRecord
    from ...domain.shared.events import EventBus
    from ..interfaces.stream_acquirer import AudioStream, StreamAcquirer
    from ..interfaces.voice_adapter import VoiceAdapter
    from .queue_store import QueueStore

logger = logging.getLogger(__name__)


class _MessageKind(Enum):
    JOIN = "join"
    ADVANCE = "advance"
    SKIP = "skip"
    TRACK_ENDED = "track_ended"
    LEAVE = "leave"


@dataclass
class _Message:
    kind: _MessageKind
    reason: AdvanceReason = AdvanceReason.ENQUEUED
    channel_id: int | None = None
    token: int | None = None
    reply: asyncio.Future[Any] | None = None


@dataclass
class _GuildSession:
    guild_id: int
    mailbox: asyncio.Queue[_Message] = field(default_factory=asyncio.Queue)
    worker: asyncio.Task[None] | None = None
    state: PlaybackState = PlaybackState.IDLE
    # Incremented on every hand-off, skip, and teardown; a track-end
    # notification only counts when it carries the current value.
    token: int = 0
    stream: AudioStream | None = None
    current_track: TrackRecord | None = None


class PlaybackEngine:
    """Drives continuous playback for every guild.

    Each guild gets one worker task reading a mailbox, so joins, advances,
    skips, leaves and track-end notifications for that guild run strictly one
    after another. The worker additionally holds the queue store's lock for
    the guild from consume through hand-off, which keeps
    :class:`~discord_jukebox.application.services.queue_service.QueueService`
    adds out of the middle of an advance.
    """

    def __init__(
        self,
        *,
        queue_store: QueueStore,
        stream_acquirer: StreamAcquirer,
        voice_adapter: VoiceAdapter,
        event_bus: EventBus,
    ) -> None:
        self._store = queue_store
        self._acquirer = stream_acquirer
        self._voice = voice_adapter
        self._events = event_bus
        self._sessions: dict[int, _GuildSession] = {}

        self._voice.set_on_track_end_callback(self.notify_track_end)

    # ── Public operations ──────────────────────────────────────────

    async def join(self, guild_id: int, channel_id: int) -> None:
        """Connect to *channel_id*; raises when already connected or on failure."""
        await self._submit(guild_id, _Message(_MessageKind.JOIN, channel_id=channel_id))

    async def advance(
        self, guild_id: int, reason: AdvanceReason = AdvanceReason.ENQUEUED
    ) -> AdvanceOutcome:
        """Move to the next playable track, or tear down when the queue is empty.

        With ``AdvanceReason.ENQUEUED`` nothing happens while the guild is
        already acquiring or playing.
        """
        return await self._submit(guild_id, _Message(_MessageKind.ADVANCE, reason=reason))

    async def skip(self, guild_id: int) -> SkipOutcome:
        """Stop the current output and advance exactly once."""
        return await self._submit(guild_id, _Message(_MessageKind.SKIP))

    async def leave(self, guild_id: int) -> None:
        """Clear the queue, stop output, and disconnect."""
        await self._submit(guild_id, _Message(_MessageKind.LEAVE))

    async def notify_track_end(self, guild_id: int, token: int) -> None:
        """Voice transport callback; queued behind any in-flight command."""
        session = self._session(guild_id)
        session.mailbox.put_nowait(_Message(_MessageKind.TRACK_ENDED, token=token))

    def state(self, guild_id: int) -> PlaybackState:
        session = self._sessions.get(guild_id)
        return session.state if session is not None else PlaybackState.IDLE

    def current_track(self, guild_id: int) -> TrackRecord | None:
        session = self._sessions.get(guild_id)
        return session.current_track if session is not None else None

    async def shutdown(self) -> None:
        """Stop every worker and reap every stream."""
        sessions = list(self._sessions.values())
        self._sessions.clear()

        for session in sessions:
            if session.worker is not None:
                session.worker.cancel()
        await asyncio.gather(
            *(s.worker for s in sessions if s.worker is not None),
            return_exceptions=True,
        )
        for session in sessions:
            await self._release_stream(session)

    # ── Worker plumbing ────────────────────────────────────────────

    def _session(self, guild_id: int) -> _GuildSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = self._sessions[guild_id] = _GuildSession(guild_id=guild_id)
        if session.worker is None or session.worker.done():
            session.worker = asyncio.create_task(
                self._run(session), name=f"playback-worker-{guild_id}"
            )
            logger.debug(LogTemplates.ENGINE_WORKER_STARTED, guild_id)
        return session

    async def _submit(self, guild_id: int, message: _Message) -> Any:
        session = self._session(guild_id)
        message.reply = asyncio.get_running_loop().create_future()
        session.mailbox.put_nowait(message)
        return await message.reply

    async def _run(self, session: _GuildSession) -> None:
        try:
            while True:
                message = await session.mailbox.get()
                try:
                    result = await self._dispatch(session, message)
                except asyncio.CancelledError:
                    if message.reply is not None and not message.reply.done():
                        message.reply.cancel()
                    raise
                except Exception as exc:
                    if not isinstance(exc, DomainError):
                        logger.exception(
                            LogTemplates.ENGINE_WORKER_ERROR, session.guild_id, message.kind.value
                        )
                    if message.reply is not None and not message.reply.done():
                        message.reply.set_exception(exc)
                else:
                    if message.reply is not None and not message.reply.done():
                        message.reply.set_result(result)
                finally:
                    session.mailbox.task_done()
        finally:
            logger.debug(LogTemplates.ENGINE_WORKER_STOPPED, session.guild_id)

    async def _dispatch(self, session: _GuildSession, message: _Message) -> Any:
        match message.kind:
            case _MessageKind.JOIN:
                assert message.channel_id is not None
                return await self._handle_join(session, message.channel_id)
            case _MessageKind.ADVANCE:
                return await self._handle_advance(session, message.reason)
            case _MessageKind.SKIP:
                return await self._handle_skip(session)
            case _MessageKind.TRACK_ENDED:
                assert message.token is not None
                return await self._handle_track_ended(session, message.token)
            case _MessageKind.LEAVE:
                return await self._handle_leave(session)

    # ── Handlers (run on the guild's worker) ───────────────────────

    async def _handle_join(self, session: _GuildSession, channel_id: int) -> None:
        guild_id = session.guild_id
        if self._voice.is_connected(guild_id):
            raise AlreadyConnectedError(guild_id)
        if not await self._voice.connect(guild_id, channel_id):
            raise VoiceConnectionError(guild_id, channel_id)

    async def _handle_advance(
        self, session: _GuildSession, reason: AdvanceReason
    ) -> AdvanceOutcome:
        if reason is AdvanceReason.ENQUEUED and session.state is not PlaybackState.IDLE:
            return AdvanceOutcome.PLAYING
        return await self._advance(session, reason)

    async def _handle_skip(self, session: _GuildSession) -> SkipOutcome:
        guild_id = session.guild_id
        if not self._voice.is_connected(guild_id):
            raise NotConnectedError(guild_id)
        if not self._store.is_playing(guild_id):
            return SkipOutcome.NOTHING_PLAYING

        logger.info(LogTemplates.ENGINE_SKIP, guild_id)
        # The stopped stream's own end notification will carry a stale token.
        session.token += 1
        await self._voice.stop(guild_id)
        await self._release_stream(session)

        outcome = await self._advance(session, AdvanceReason.SKIPPED)
        if outcome is AdvanceOutcome.PLAYING:
            return SkipOutcome.SKIPPED
        return SkipOutcome.QUEUE_ENDED

    async def _handle_track_ended(self, session: _GuildSession, token: int) -> None:
        if token != session.token or session.state is not PlaybackState.PLAYING:
            logger.debug(
                LogTemplates.ENGINE_STALE_TRACK_END, session.guild_id, token, session.token
            )
            return
        await self._advance(session, AdvanceReason.TRACK_ENDED)

    async def _handle_leave(self, session: _GuildSession) -> None:
        guild_id = session.guild_id
        if not self._voice.is_connected(guild_id):
            raise NotConnectedError(guild_id)

        async with self._store.lock(guild_id):
            self._store.clear(guild_id)
            await self._terminate(session, reason=TeardownReason.LEAVE)

    # ── Core algorithm ─────────────────────────────────────────────

    async def _advance(self, session: _GuildSession, reason: AdvanceReason) -> AdvanceOutcome:
        guild_id = session.guild_id
        logger.debug(LogTemplates.ENGINE_ADVANCE, guild_id, reason.value)
        await self._release_stream(session)

        async with self._store.lock(guild_id):
            while True:
                track = self._store.consume(guild_id)
                if track is None:
                    await self._terminate(session, reason=TeardownReason.QUEUE_EXHAUSTED)
                    return AdvanceOutcome.EXHAUSTED

                self._store.set_status(guild_id, True)
                session.state = PlaybackState.ACQUIRING
                session.current_track = track

                stream: AudioStream | None = None
                try:
                    stream = await self._acquirer.acquire(track)
                    session.token += 1
                    started = await self._voice.play(guild_id, stream, token=session.token)
                except AcquisitionError as exc:
                    await self._report_failure(session, track, exc.message)
                    continue
                except Exception:
                    logger.exception(LogTemplates.ENGINE_TRACK_ERROR, track.title, guild_id)
                    if stream is not None:
                        await asyncio.to_thread(stream.cleanup)
                    await self._report_failure(
                        session, track, ErrorMessages.TRACK_UNEXPECTED_ERROR
                    )
                    continue

                if not started:
                    await asyncio.to_thread(stream.cleanup)
                    if not self._voice.is_connected(guild_id):
                        # Dropped from voice behind our back; every remaining
                        # track would be refused the same way.
                        logger.warning(LogTemplates.ENGINE_VOICE_LOST, guild_id)
                        self._store.clear(guild_id)
                        await self._terminate(session, reason=TeardownReason.VOICE_LOST)
                        return AdvanceOutcome.EXHAUSTED
                    await self._report_failure(
                        session, track, ErrorMessages.SINK_REFUSED_STREAM
                    )
                    continue

                session.stream = stream
                session.state = PlaybackState.PLAYING
                logger.info(LogTemplates.ENGINE_TRACK_STARTED, track.title, guild_id)
                await self._events.publish(
                    TrackStartedPlaying(
                        guild_id=guild_id,
                        track_id=track.id,
                        track_title=track.title,
                        source_url=track.source_url,
                        duration_seconds=track.duration_seconds,
                    )
                )
                return AdvanceOutcome.PLAYING

    async def _report_failure(
        self, session: _GuildSession, track: TrackRecord, reason: str
    ) -> None:
        logger.warning(LogTemplates.ENGINE_TRACK_FAILED, track.title, session.guild_id, reason)
        session.current_track = None
        await self._events.publish(
            TrackPlaybackFailed(
                guild_id=session.guild_id,
                track_id=track.id,
                track_title=track.title,
                reason=reason,
            )
        )

    async def _terminate(self, session: _GuildSession, *, reason: TeardownReason) -> bool:
        """The single teardown path. Returns False when there was nothing to tear down.

        Only a session that was still active, or still connected, announces
        anything; a repeated call changes nothing and publishes nothing.
        """
        guild_id = session.guild_id
        was_active = session.state.is_active or self._store.is_playing(guild_id)
        session.token += 1
        await self._release_stream(session)
        session.state = PlaybackState.IDLE
        session.current_track = None
        self._store.set_status(guild_id, False)

        if not self._voice.is_connected(guild_id):
            if reason is TeardownReason.VOICE_LOST and was_active:
                await self._events.publish(
                    SessionDestroyed(guild_id=guild_id, reason=reason.value)
                )
                return True
            logger.debug(LogTemplates.ENGINE_TEARDOWN_NOOP, guild_id)
            return False

        if reason is TeardownReason.QUEUE_EXHAUSTED:
            logger.info(LogTemplates.ENGINE_QUEUE_FINISHED, guild_id)
            await self._events.publish(QueueExhausted(guild_id=guild_id))

        await self._voice.disconnect(guild_id)
        logger.info(LogTemplates.ENGINE_SESSION_TORN_DOWN, guild_id)
        await self._events.publish(SessionDestroyed(guild_id=guild_id, reason=reason.value))
        return True

    @staticmethod
    async def _release_stream(session: _GuildSession) -> None:
        # Reaping waits on child processes; keep it off the event loop.
        stream, session.stream = session.stream, None
        if stream is not None:
            await asyncio.to_thread(stream.cleanup)
