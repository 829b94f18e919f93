"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaybackState(Enum):
    """Playback state with enforced transitions.

    State transitions:
    - IDLE -> LOADING (an item was taken from the queue)
    - LOADING -> PLAYING (stream handed to the sink)
    - LOADING -> IDLE (extraction failed, item skipped while loading, or stop)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING | PAUSED -> IDLE (sink ended or errored, or stop)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.LOADING},
            PlaybackState.LOADING: {PlaybackState.PLAYING, PlaybackState.IDLE},
            PlaybackState.PLAYING: {PlaybackState.PAUSED, PlaybackState.IDLE},
            PlaybackState.PAUSED: {PlaybackState.PLAYING, PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class ExtractionErrorKind(Enum):
    """Closed set of user-facing stream extraction failures."""

    BLOCKED = "blocked"
    AGE_RESTRICTED = "age_restricted"
    PRIVATE = "private"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ExtractionAttempt:
    """One failed stream backend attempt, kept only for classification and logs."""

    backend: str
    raw_error: str

    def __str__(self) -> str:
        return f"{self.backend}: {self.raw_error}"


class SinkEventKind(Enum):
    """Lifecycle notifications emitted by the voice sink."""

    STARTED = "started"
    ENDED = "ended"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class SinkEvent:
    """A sink lifecycle event tagged with the queue item id it belongs to."""

    kind: SinkEventKind
    tag: str
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in {SinkEventKind.ENDED, SinkEventKind.ERRORED}
