"""Per-guild playback state machine.

A session owns one bounded queue, the item currently loading or playing,
the playback volume and the voice sink. All of its state is mutated on the
event loop thread only; the single invariant that keeps it consistent is
that at most one advance task exists at a time, guarded by ``_advancing``
which is set synchronously before the task is created.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from discord_jukebox.application.services.playback_models import (
    AdvanceResult,
    AdvanceStatus,
    EnqueueReceipt,
    SessionSnapshot,
)
from discord_jukebox.domain.music.error_classifier import describe
from discord_jukebox.domain.music.exceptions import ExtractionFailedError, QueueFullError
from discord_jukebox.domain.music.queue import TrackQueue
from discord_jukebox.domain.music.value_objects import (
    ExtractionErrorKind,
    PlaybackState,
    SinkEvent,
    SinkEventKind,
)
from discord_jukebox.domain.shared.exceptions import InvalidOperationError
from discord_jukebox.domain.shared.messages import (
    ErrorMessages,
    ExtractionMessages,
    LogTemplates,
)
from discord_jukebox.domain.shared.validators import clamp_unit

if TYPE_CHECKING:
    from ...domain.music.entities import QueueItem, Track
    from ..interfaces.voice_adapter import AudioSink
    from .stream_extractor import StreamExtractor

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _PendingStart:
    item: QueueItem
    future: asyncio.Future[AdvanceResult]


class PlaybackSession:
    """Queue, state and sink for one guild.

    ``enqueue`` never waits: when nothing is current it takes the item
    straight into LOADING and starts the advance task, otherwise it appends
    and reports the queue position. Callers that started playback can then
    ``wait_for_start`` with a bound to learn whether the track is playing.
    """

    def __init__(
        self,
        *,
        guild_id: int,
        sink: AudioSink,
        extractor: StreamExtractor,
        max_queue_size: int,
        volume: float = 0.5,
        on_closed: Callable[[PlaybackSession], None] | None = None,
    ) -> None:
        self._guild_id = guild_id
        self._sink = sink
        self._extractor = extractor
        self._queue = TrackQueue(max_queue_size)
        self._state = PlaybackState.IDLE
        self._current: QueueItem | None = None
        self._volume = clamp_unit(volume)
        self._on_closed = on_closed

        self._advancing = False
        self._advance_task: asyncio.Task[None] | None = None
        self._skip_requested: str | None = None
        self._pending: dict[str, _PendingStart] = {}
        self._closed = False

        sink.set_event_handler(self._on_sink_event)

    # === Inspection ===

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current(self) -> QueueItem | None:
        return self._current

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_advancing(self) -> bool:
        return self._advancing

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            guild_id=self._guild_id,
            state=self._state,
            current=self._current,
            queue=tuple(self._queue.peek_all()),
            volume=self._volume,
            capacity=self._queue.capacity,
        )

    # === Commands ===

    def enqueue(self, track: Track) -> EnqueueReceipt:
        """Add a track; start loading it right away when the session is idle.

        Raises:
            QueueFullError: The queue is at capacity; nothing was changed.
            InvalidOperationError: The session has been stopped.
        """
        self._ensure_open("enqueue")

        try:
            item = self._queue.push(track)
        except QueueFullError:
            logger.info(LogTemplates.QUEUE_FULL, self._guild_id, self._queue.capacity)
            raise

        if self._current is None and not self._advancing:
            self._start_advance()

        starts_playback = self._current is not None and self._current.id == item.id
        if starts_playback:
            future = asyncio.get_running_loop().create_future()
            self._pending[item.id] = _PendingStart(item=item, future=future)
            position = 0
        else:
            position = self._queue.position_of(item.id) or 0

        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, self._guild_id)
        return EnqueueReceipt(
            item=item,
            position=position,
            queue_length=len(self._queue),
            starts_playback=starts_playback,
        )

    async def wait_for_start(self, item: QueueItem, timeout: float) -> AdvanceResult:
        """Wait up to ``timeout`` seconds for an item that started playback to resolve.

        Must be called right after the ``enqueue`` whose receipt has
        ``starts_playback`` set, before yielding to the loop; the outcome is
        handed to the waiter and then forgotten.
        """
        pending = self._pending.get(item.id)
        if pending is None:
            raise InvalidOperationError(
                operation="wait_for_start",
                current_state=self._state.value,
                message=ErrorMessages.NO_PENDING_START.format(item_id=item.id),
            )

        try:
            return await asyncio.wait_for(asyncio.shield(pending.future), timeout)
        except TimeoutError:
            return AdvanceResult(item=item, status=AdvanceStatus.TIMED_OUT)

    async def pause(self) -> bool:
        if self._closed or self._state is not PlaybackState.PLAYING:
            return False
        if not await self._sink.pause() or self._state is not PlaybackState.PLAYING:
            return False

        self._transition(PlaybackState.PAUSED)
        logger.info(LogTemplates.PLAYBACK_PAUSED, self._guild_id)
        return True

    async def resume(self) -> bool:
        if self._closed or self._state is not PlaybackState.PAUSED:
            return False
        if not await self._sink.resume() or self._state is not PlaybackState.PAUSED:
            return False

        self._transition(PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_RESUMED, self._guild_id)
        return True

    async def skip(self) -> QueueItem | None:
        """Skip the current item and return it, or None when nothing is current.

        A playing item is interrupted through the sink, whose ENDED event
        advances the queue. An item still loading is marked so its stream is
        discarded when extraction completes.
        """
        if self._closed or self._current is None:
            return None

        skipped = self._current
        if self._state is PlaybackState.LOADING:
            self._skip_requested = skipped.id
        else:
            await self._sink.stop()

        logger.info(LogTemplates.PLAYBACK_SKIPPED, skipped.title, self._guild_id)
        return skipped

    async def set_volume(self, volume: float) -> float:
        self._ensure_open("set_volume")
        self._volume = clamp_unit(volume)
        if self._state.is_active:
            await self._sink.set_volume(self._volume)
        logger.info(LogTemplates.PLAYBACK_VOLUME_SET, self._volume, self._guild_id)
        return self._volume

    async def stop(self) -> int:
        """Tear the session down for good and return how many queued items were dropped.

        An extraction still in flight is left to finish; its stream is closed
        and discarded when it arrives.
        """
        if self._closed:
            return 0
        self._closed = True

        cleared = self._queue.clear()
        self._current = None
        self._skip_requested = None
        if self._state is not PlaybackState.IDLE:
            self._transition(PlaybackState.IDLE)

        for pending in self._pending.values():
            if not pending.future.done():
                pending.future.set_result(
                    AdvanceResult(item=pending.item, status=AdvanceStatus.STOPPED)
                )
        self._pending.clear()

        try:
            await self._sink.stop()
            await self._sink.disconnect()
        except Exception:
            logger.exception(LogTemplates.SESSION_TEARDOWN_FAILED, self._guild_id)

        logger.info(LogTemplates.SESSION_STOPPED, self._guild_id, cleared)
        if self._on_closed is not None:
            self._on_closed(self)
        return cleared

    # === Advance ===

    def _start_advance(self) -> bool:
        if self._advancing or self._closed:
            return False

        item = self._take_next()
        if item is None:
            logger.debug(LogTemplates.PLAYBACK_QUEUE_EXHAUSTED, self._guild_id)
            return False

        self._advancing = True
        self._advance_task = asyncio.create_task(
            self._run_advance(item), name=f"advance-{self._guild_id}"
        )
        return True

    def _take_next(self) -> QueueItem | None:
        item = self._queue.pop_front()
        if item is None:
            return None
        self._current = item
        self._transition(PlaybackState.LOADING)
        return item

    async def _run_advance(self, item: QueueItem) -> None:
        next_item: QueueItem | None = item
        try:
            while next_item is not None:
                result = await self._load(next_item)
                self._resolve_pending(result)
                if result.is_playing or self._closed:
                    return

                # Failed or skipped items are never re-enqueued.
                self._current = None
                self._transition(PlaybackState.IDLE)
                next_item = self._take_next()

            logger.debug(LogTemplates.PLAYBACK_QUEUE_EXHAUSTED, self._guild_id)
        finally:
            self._advancing = False
            self._advance_task = None

    async def _load(self, item: QueueItem) -> AdvanceResult:
        logger.info(LogTemplates.PLAYBACK_LOADING, item.title, self._guild_id)
        try:
            stream = await self._extractor.open_stream(item.source_url)
        except ExtractionFailedError as e:
            logger.warning(
                LogTemplates.PLAYBACK_EXTRACTION_FAILED, item.title, self._guild_id, e.kind.value
            )
            return AdvanceResult.failed(item, e.kind, e.detail)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_UNEXPECTED_ERROR, item.title, self._guild_id)
            kind = ExtractionErrorKind.UNKNOWN
            return AdvanceResult.failed(item, kind, describe(kind))
        finally:
            skip_requested = self._skip_requested == item.id
            self._skip_requested = None

        if self._closed:
            logger.info(LogTemplates.PLAYBACK_DISCARDED_AFTER_STOP, item.title, self._guild_id)
            stream.close()
            return AdvanceResult(item=item, status=AdvanceStatus.STOPPED)

        if skip_requested:
            logger.info(LogTemplates.PLAYBACK_SKIPPED_WHILE_LOADING, item.title, self._guild_id)
            stream.close()
            return AdvanceResult(item=item, status=AdvanceStatus.SKIPPED)

        try:
            await self._sink.play(stream, volume=self._volume, tag=item.id)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_SINK_FAILED, item.title, self._guild_id)
            stream.close()
            return AdvanceResult.failed(
                item, ExtractionErrorKind.UNKNOWN, ExtractionMessages.PLAYBACK_FAILED
            )

        self._transition(PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_STARTED, item.title, self._guild_id)
        return AdvanceResult.playing(item)

    def _resolve_pending(self, result: AdvanceResult) -> None:
        pending = self._pending.pop(result.item.id, None)
        if pending is not None and not pending.future.done():
            pending.future.set_result(result)

    # === Sink events ===

    def _on_sink_event(self, event: SinkEvent) -> None:
        current = self._current
        if (
            self._closed
            or current is None
            or event.tag != current.id
            or not self._state.is_active
        ):
            logger.debug(
                LogTemplates.SINK_EVENT_IGNORED, event.kind.value, event.tag, self._guild_id
            )
            return

        logger.debug(LogTemplates.SINK_EVENT, event.kind.value, event.tag, self._guild_id)
        if not event.is_terminal:
            return

        if event.kind is SinkEventKind.ERRORED:
            logger.warning(LogTemplates.SINK_ERROR, current.title, self._guild_id, event.error)

        self._current = None
        self._transition(PlaybackState.IDLE)
        self._start_advance()

    # === Helpers ===

    def _transition(self, target: PlaybackState) -> None:
        if not self._state.can_transition_to(target):
            raise InvalidOperationError(
                operation=f"transition to {target.value}",
                current_state=self._state.value,
                message=f"Cannot transition from {self._state.value} to {target.value}",
            )
        logger.debug(
            LogTemplates.SESSION_STATE_CHANGED, self._guild_id, self._state.value, target.value
        )
        self._state = target

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise InvalidOperationError(
                operation=operation,
                current_state="closed",
                message=ErrorMessages.SESSION_CLOSED,
            )
