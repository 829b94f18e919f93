"""
Skip Track Command

Command and handler for skipping the current track.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class SkipStatus(Enum):
    """Status codes for skip results."""

    SUCCESS = "success"
    NOTHING_PLAYING = "nothing_playing"


class SkipTrackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class SkipResult(BaseModel):
    """Result of a skip track command."""

    model_config = ConfigDict(frozen=True)

    status: SkipStatus
    message: str
    skipped_track: Track | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SkipStatus.SUCCESS

    @classmethod
    def success(cls, skipped_track: Track) -> SkipResult:
        return cls(
            status=SkipStatus.SUCCESS,
            message=DiscordUIMessages.ACTION_SKIPPED.format(title=skipped_track.title),
            skipped_track=skipped_track,
        )

    @classmethod
    def error(cls, status: SkipStatus, message: str) -> SkipResult:
        return cls(status=status, message=message)


class SkipTrackHandler:
    """Skips whatever is current, whether it is still loading or already playing.

    The next queued item is started by the session itself once the skipped
    one has ended, so the result does not name it.
    """

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: SkipTrackCommand) -> SkipResult:
        session = self._registry.get(command.guild_id)
        if session is None:
            return SkipResult.error(
                SkipStatus.NOTHING_PLAYING, DiscordUIMessages.STATE_NOTHING_TO_SKIP
            )

        skipped = await session.skip()
        if skipped is None:
            return SkipResult.error(
                SkipStatus.NOTHING_PLAYING, DiscordUIMessages.STATE_NOTHING_TO_SKIP
            )

        return SkipResult.success(skipped.track)
