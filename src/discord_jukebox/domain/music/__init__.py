"""
Music Bounded Context

Domain logic for tracks, the bounded queue, playback states and error classification.
"""

from discord_jukebox.domain.music.entities import QueueItem, Track
from discord_jukebox.domain.music.error_classifier import classify, describe
from discord_jukebox.domain.music.exceptions import (
    ExtractionFailedError,
    JoinFailedError,
    QueueFullError,
    SinkError,
)
from discord_jukebox.domain.music.queue import TrackQueue
from discord_jukebox.domain.music.value_objects import (
    ExtractionAttempt,
    ExtractionErrorKind,
    PlaybackState,
    SinkEvent,
    SinkEventKind,
)

__all__ = [
    # Entities
    "Track",
    "QueueItem",
    "TrackQueue",
    # Value Objects
    "PlaybackState",
    "ExtractionErrorKind",
    "ExtractionAttempt",
    "SinkEvent",
    "SinkEventKind",
    # Errors
    "QueueFullError",
    "ExtractionFailedError",
    "JoinFailedError",
    "SinkError",
    "classify",
    "describe",
]
