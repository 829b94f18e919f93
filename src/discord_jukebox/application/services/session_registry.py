"""Process-wide map of guild id to playback session."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from discord_jukebox.application.services.playback_session import PlaybackSession
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.voice_adapter import AudioSink
    from .stream_extractor import StreamExtractor

logger = logging.getLogger(__name__)

SinkFactory = Callable[[], Awaitable["AudioSink"]]


class SessionRegistry:
    """Creates at most one live session per guild.

    Creation is serialized per guild so two concurrent first plays in the
    same guild end up sharing one voice connection. A stopped session is
    removed through its ``on_closed`` hook and replaced on the next request.
    """

    def __init__(
        self,
        *,
        extractor: StreamExtractor,
        max_queue_size: int,
        default_volume: float = 0.5,
    ) -> None:
        self._extractor = extractor
        self._max_queue_size = max_queue_size
        self._default_volume = default_volume
        self._sessions: dict[int, PlaybackSession] = {}
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions

    def get(self, guild_id: int) -> PlaybackSession | None:
        """Return the live session for a guild without creating one."""
        session = self._sessions.get(guild_id)
        if session is not None and session.is_closed:
            return None
        return session

    async def get_or_create(self, guild_id: int, connect: SinkFactory) -> PlaybackSession:
        """Return the guild's live session, connecting a new sink if there is none.

        Raises:
            JoinFailedError: ``connect`` could not join the voice channel. No
                session is registered in that case.
        """
        session = self.get(guild_id)
        if session is not None:
            return session

        while True:
            lock = self._locks[guild_id]
            async with lock:
                # remove() may have dropped this lock while we waited for it
                if self._locks.get(guild_id) is not lock:
                    continue
                return await self._create_locked(guild_id, connect)

    async def _create_locked(self, guild_id: int, connect: SinkFactory) -> PlaybackSession:
        existing = self._sessions.get(guild_id)
        if existing is not None:
            if not existing.is_closed:
                return existing
            logger.info(LogTemplates.SESSION_STALE_REPLACED, guild_id)
            del self._sessions[guild_id]

        sink = await connect()
        session = PlaybackSession(
            guild_id=guild_id,
            sink=sink,
            extractor=self._extractor,
            max_queue_size=self._max_queue_size,
            volume=self._default_volume,
            on_closed=self._on_session_closed,
        )
        self._sessions[guild_id] = session
        logger.info(LogTemplates.SESSION_CREATED, guild_id)
        return session

    def remove(self, guild_id: int, session: PlaybackSession | None = None) -> bool:
        """Forget a guild's session.

        When ``session`` is given the entry is only removed if it is that
        exact object, so a late hook from an old session cannot evict its
        replacement.
        """
        existing = self._sessions.get(guild_id)
        if existing is None or (session is not None and existing is not session):
            return False
        del self._sessions[guild_id]
        lock = self._locks.get(guild_id)
        if lock is not None and not lock.locked():
            del self._locks[guild_id]
        logger.info(LogTemplates.SESSION_REMOVED, guild_id)
        return True

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        if sessions:
            logger.info(LogTemplates.SESSION_CLOSE_ALL, len(sessions))
        for session in sessions:
            await session.stop()
        self._sessions.clear()
        self._locks.clear()

    def _on_session_closed(self, session: PlaybackSession) -> None:
        self.remove(session.guild_id, session)
