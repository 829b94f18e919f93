"""Commands and handler for pause, resume and volume changes."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import DiscordSnowflake, VolumePercent

if TYPE_CHECKING:
    from ..services.session_registry import SessionRegistry


class ControlAction(Enum):
    PAUSE = "pause"
    RESUME = "resume"


class ControlStatus(Enum):
    """Status codes for playback control results."""

    SUCCESS = "success"
    NO_SESSION = "no_session"
    INVALID_STATE = "invalid_state"


class ControlPlaybackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    action: ControlAction


class SetVolumeCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    percent: VolumePercent


class ControlResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: ControlStatus
    message: str

    @property
    def is_success(self) -> bool:
        return self.status == ControlStatus.SUCCESS

    @classmethod
    def success(cls, message: str) -> ControlResult:
        return cls(status=ControlStatus.SUCCESS, message=message)

    @classmethod
    def error(cls, status: ControlStatus, message: str) -> ControlResult:
        return cls(status=status, message=message)


class ControlPlaybackHandler:
    """Pause/resume and volume for an existing session; never creates one."""

    def __init__(self, *, registry: SessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: ControlPlaybackCommand) -> ControlResult:
        session = self._registry.get(command.guild_id)
        if session is None:
            return ControlResult.error(
                ControlStatus.NO_SESSION, DiscordUIMessages.STATE_NOTHING_PLAYING
            )

        match command.action:
            case ControlAction.PAUSE:
                if not await session.pause():
                    return ControlResult.error(
                        ControlStatus.INVALID_STATE, DiscordUIMessages.STATE_NOT_PLAYING
                    )
                return ControlResult.success(DiscordUIMessages.ACTION_PAUSED)
            case ControlAction.RESUME:
                if not await session.resume():
                    return ControlResult.error(
                        ControlStatus.INVALID_STATE, DiscordUIMessages.STATE_NOT_PAUSED
                    )
                return ControlResult.success(DiscordUIMessages.ACTION_RESUMED)

    async def set_volume(self, command: SetVolumeCommand) -> ControlResult:
        session = self._registry.get(command.guild_id)
        if session is None:
            return ControlResult.error(
                ControlStatus.NO_SESSION, DiscordUIMessages.STATE_NOTHING_PLAYING
            )

        await session.set_volume(command.percent / 100)
        return ControlResult.success(
            DiscordUIMessages.ACTION_VOLUME_SET.format(percent=command.percent)
        )
