"""DTOs for the playback session service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import QueueItem
from ...domain.music.value_objects import ExtractionErrorKind, PlaybackState
from ...domain.shared.types import (
    DiscordSnowflake,
    NonNegativeInt,
    PositiveInt,
    QueuePositionInt,
    UnitInterval,
)


class AdvanceStatus(Enum):
    """How the attempt to start one queue item ended."""

    PLAYING = "playing"
    FAILED = "failed"
    SKIPPED = "skipped"
    STOPPED = "stopped"
    TIMED_OUT = "timed_out"


class AdvanceResult(BaseModel):
    """Outcome of loading one item, handed to whoever waits on its first play."""

    model_config = ConfigDict(frozen=True)

    item: QueueItem
    status: AdvanceStatus
    error_kind: ExtractionErrorKind | None = None
    message: str | None = None

    @property
    def is_playing(self) -> bool:
        return self.status is AdvanceStatus.PLAYING

    @classmethod
    def playing(cls, item: QueueItem) -> AdvanceResult:
        return cls(item=item, status=AdvanceStatus.PLAYING)

    @classmethod
    def failed(cls, item: QueueItem, kind: ExtractionErrorKind, message: str) -> AdvanceResult:
        return cls(
            item=item.with_error(message),
            status=AdvanceStatus.FAILED,
            error_kind=kind,
            message=message,
        )


class EnqueueReceipt(BaseModel):
    """Acknowledgement of an enqueue.

    ``position`` is 0 when the item became current right away, otherwise its
    1-based place among the waiting items.
    """

    model_config = ConfigDict(frozen=True)

    item: QueueItem
    position: QueuePositionInt
    queue_length: NonNegativeInt
    starts_playback: bool


class SessionSnapshot(BaseModel):
    """Read-only view of a session for inspection commands."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    state: PlaybackState
    current: QueueItem | None
    queue: tuple[QueueItem, ...]
    volume: UnitInterval
    capacity: PositiveInt

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def total_duration_ms(self) -> int:
        return sum(item.track.duration_ms for item in self.queue)
