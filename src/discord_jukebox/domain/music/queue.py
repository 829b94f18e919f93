"""Bounded FIFO queue of pending items for one playback session."""

from __future__ import annotations

from collections import deque

from discord_jukebox.domain.music.entities import QueueItem, Track
from discord_jukebox.domain.music.exceptions import QueueFullError
from discord_jukebox.domain.shared.exceptions import ValidationError
from discord_jukebox.domain.shared.messages import ErrorMessages


class TrackQueue:
    """FIFO of :class:`QueueItem` whose length never exceeds ``capacity``.

    A push on a full queue raises :class:`QueueFullError` and leaves the
    queue untouched. ``peek_all`` hands out a fresh list every call so
    callers can't reach the internal storage.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValidationError(ErrorMessages.INVALID_QUEUE_CAPACITY, field="capacity")
        self._capacity = capacity
        self._items: deque[QueueItem] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self._capacity

    @property
    def total_duration_ms(self) -> int:
        return sum(item.track.duration_ms for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def push(self, track: Track) -> QueueItem:
        if self.is_full:
            raise QueueFullError(self._capacity)
        item = QueueItem(track=track)
        self._items.append(item)
        return item

    def pop_front(self) -> QueueItem | None:
        if not self._items:
            return None
        return self._items.popleft()

    def peek_all(self) -> list[QueueItem]:
        return list(self._items)

    def position_of(self, item_id: str) -> int | None:
        """1-based position of an item, or None when it is not queued."""
        for index, item in enumerate(self._items, start=1):
            if item.id == item_id:
                return index
        return None

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count
