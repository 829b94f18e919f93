"""Command and handler for stopping playback, clearing the queue and leaving voice."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class StopStatus(Enum):
    """Status codes for stop results."""

    SUCCESS = "success"
    NOTHING_PLAYING = "nothing_playing"


class StopPlaybackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class StopResult(BaseModel):

    status: StopStatus
    message: str
    tracks_cleared: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status == StopStatus.SUCCESS

    @classmethod
    def success(cls, tracks_cleared: int = 0) -> StopResult:
        return cls(
            status=StopStatus.SUCCESS,
            message=DiscordUIMessages.ACTION_STOPPED,
            tracks_cleared=tracks_cleared,
        )

    @classmethod
    def error(cls, status: StopStatus, message: str) -> StopResult:
        return cls(status=status, message=message)


class StopPlaybackHandler:

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: StopPlaybackCommand) -> StopResult:
        session = self._registry.get(command.guild_id)
        if session is None:
            return StopResult.error(
                StopStatus.NOTHING_PLAYING, DiscordUIMessages.STATE_NOTHING_PLAYING
            )

        # stop() also removes the session from the registry via its close hook.
        tracks_cleared = await session.stop()
        return StopResult.success(tracks_cleared)
