"""Port interfaces for the voice transport: connecting and rendering audio."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import DiscordSnowflake, UnitInterval

if TYPE_CHECKING:
    from ...domain.music.value_objects import SinkEvent
    from .stream_backend import AudioStream

SinkEventHandler = Callable[["SinkEvent"], None]


class AudioSink(ABC):
    """A joined voice connection that renders one stream at a time.

    The sink reports lifecycle changes through the single handler installed
    with :meth:`set_event_handler`; every event carries the ``tag`` passed
    to :meth:`play`. Handlers are invoked on the event loop thread, and
    never before the :meth:`play` call for that tag has returned.
    """

    @abstractmethod
    def set_event_handler(self, handler: SinkEventHandler) -> None:
        ...

    @abstractmethod
    async def play(self, stream: AudioStream, *, volume: UnitInterval, tag: str) -> None:
        """Start rendering ``stream``; raises SinkError when it can't."""
        ...

    @abstractmethod
    async def pause(self) -> bool:
        ...

    @abstractmethod
    async def resume(self) -> bool:
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Interrupt the current stream; the sink then reports ENDED for its tag."""
        ...

    @abstractmethod
    async def set_volume(self, volume: UnitInterval) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the voice connection."""
        ...


class VoiceConnector(ABC):
    """Joins voice channels and hands back a sink for the connection."""

    @abstractmethod
    async def connect(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> AudioSink:
        """Join ``channel_id``; raises JoinFailedError when that is impossible."""
        ...
