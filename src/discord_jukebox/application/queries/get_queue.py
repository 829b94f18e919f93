"""Query for retrieving the current queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import PlaybackState
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt, UnitInterval

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class QueueInfo(BaseModel):

    guild_id: DiscordSnowflake
    state: PlaybackState = PlaybackState.IDLE
    current_track: Track | None = None
    tracks: list[Track] = Field(default_factory=list)
    total_duration_ms: NonNegativeInt = 0
    volume: UnitInterval | None = None

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return self.current_track is None and not self.tracks


class GetQueueHandler:

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    async def handle(self, query: GetQueueQuery) -> QueueInfo:
        session = self._registry.get(query.guild_id)
        if session is None:
            return QueueInfo(guild_id=query.guild_id)

        snapshot = session.snapshot()
        return QueueInfo(
            guild_id=query.guild_id,
            state=snapshot.state,
            current_track=snapshot.current.track if snapshot.current else None,
            tracks=[item.track for item in snapshot.queue],
            total_duration_ms=snapshot.total_duration_ms,
            volume=snapshot.volume,
        )
