"""Core domain entities for the music bounded context."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.types import (
    DurationMs,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
    UtcDatetimeField,
)


def _new_item_id() -> str:
    return uuid4().hex


class Track(BaseModel):
    """Immutable value object representing a resolved, playable track."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    source_url: HttpUrlStr
    duration_ms: DurationMs = 0
    thumbnail_url: HttpUrlStr | None = None
    requested_by: str = ""

    @property
    def duration_seconds(self) -> int:
        return self.duration_ms // 1000

    @property
    def duration_formatted(self) -> str:
        """Format duration as M:SS or H:MM:SS."""
        if not self.duration_ms:
            return "Live"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    def with_requester(self, requested_by: NonEmptyStr) -> Track:
        """Return a copy of this track with the requester populated."""
        return self.model_copy(update={"requested_by": requested_by})


class QueueItem(BaseModel):
    """A track waiting in, or taken from, a session's queue.

    ``id`` is the only identity used across asynchronous boundaries: sink
    events and first-play waiters are matched on it, never on the track.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    track: Track
    id: NonEmptyStr = Field(default_factory=_new_item_id)
    enqueued_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_error: str | None = None

    @property
    def title(self) -> str:
        return self.track.title

    @property
    def source_url(self) -> str:
        return self.track.source_url

    def with_error(self, message: str) -> QueueItem:
        """Return a copy carrying the classified error message."""
        return self.model_copy(update={"last_error": message})
