"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

import functools
import logging
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_jukebox.application.services.playback_models import AdvanceStatus
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.exceptions import JoinFailedError, QueueFullError
from discord_jukebox.domain.music.value_objects import ExtractionErrorKind
from discord_jukebox.domain.shared.exceptions import InvalidOperationError
from discord_jukebox.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..interfaces.voice_adapter import VoiceConnector
    from ..services.playback_session import PlaybackSession
    from ..services.search_resolver import SearchResolver
    from ..services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    STARTING = "starting"
    NOT_FOUND = "not_found"
    QUEUE_FULL = "queue_full"
    JOIN_FAILED = "join_failed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL, queue the track, and start playback if idle."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    requested_by: NonEmptyStr
    query: NonEmptyStr

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackResult(BaseModel):
    """Result of a play track command."""

    model_config = ConfigDict(frozen=True)

    status: PlayTrackStatus
    message: str
    track: Track | None = None
    queue_position: NonNegativeInt | None = None
    queue_length: NonNegativeInt = 0
    error_kind: ExtractionErrorKind | None = None

    @property
    def is_success(self) -> bool:
        return self.status in {
            PlayTrackStatus.NOW_PLAYING,
            PlayTrackStatus.QUEUED,
            PlayTrackStatus.STARTING,
        }

    @classmethod
    def now_playing(cls, track: Track, queue_length: int) -> PlayTrackResult:
        return cls(
            status=PlayTrackStatus.NOW_PLAYING,
            message=DiscordUIMessages.PLAY_NOW_PLAYING.format(
                title=track.title, duration=track.duration_formatted
            ),
            track=track,
            queue_position=0,
            queue_length=queue_length,
        )

    @classmethod
    def queued(cls, track: Track, position: int, queue_length: int) -> PlayTrackResult:
        return cls(
            status=PlayTrackStatus.QUEUED,
            message=DiscordUIMessages.PLAY_QUEUED.format(
                title=track.title, duration=track.duration_formatted, position=position
            ),
            track=track,
            queue_position=position,
            queue_length=queue_length,
        )

    @classmethod
    def error(
        cls,
        status: PlayTrackStatus,
        message: str,
        *,
        track: Track | None = None,
        error_kind: ExtractionErrorKind | None = None,
    ) -> PlayTrackResult:
        return cls(status=status, message=message, track=track, error_kind=error_kind)


class PlayTrackHandler:
    """Resolves a query, joins voice if needed, enqueues, and waits for the first play.

    Only a request that made its item current waits, and never longer than
    ``first_play_timeout``; a slow stream is reported as STARTING and keeps
    loading in the background.
    """

    def __init__(
        self,
        *,
        resolver: SearchResolver,
        registry: SessionRegistry,
        connector: VoiceConnector,
        first_play_timeout: float = 15.0,
    ) -> None:
        self._resolver = resolver
        self._registry = registry
        self._connector = connector
        self._first_play_timeout = first_play_timeout

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        track = await self._resolver.resolve(command.query)
        if track is None:
            return PlayTrackResult.error(
                PlayTrackStatus.NOT_FOUND,
                DiscordUIMessages.PLAY_NOT_FOUND.format(query=command.query),
            )
        track = track.with_requester(command.requested_by)

        try:
            session = await self._registry.get_or_create(
                command.guild_id,
                functools.partial(self._connector.connect, command.guild_id, command.channel_id),
            )
        except JoinFailedError as e:
            logger.warning(
                LogTemplates.VOICE_JOIN_FAILED, command.channel_id, command.guild_id, e.reason
            )
            return PlayTrackResult.error(
                PlayTrackStatus.JOIN_FAILED,
                DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE,
                track=track,
            )

        return await self._enqueue(session, track)

    async def _enqueue(self, session: PlaybackSession, track: Track) -> PlayTrackResult:
        try:
            receipt = session.enqueue(track)
        except QueueFullError as e:
            return PlayTrackResult.error(
                PlayTrackStatus.QUEUE_FULL,
                DiscordUIMessages.ERROR_QUEUE_FULL.format(capacity=e.capacity),
                track=track,
            )
        except InvalidOperationError:
            # The session was stopped between lookup and enqueue.
            return PlayTrackResult.error(
                PlayTrackStatus.FAILED, DiscordUIMessages.ERROR_SESSION_CLOSING, track=track
            )

        if not receipt.starts_playback:
            return PlayTrackResult.queued(track, receipt.position, receipt.queue_length)

        outcome = await session.wait_for_start(receipt.item, self._first_play_timeout)
        match outcome.status:
            case AdvanceStatus.PLAYING:
                return PlayTrackResult.now_playing(track, session.queue_length)
            case AdvanceStatus.TIMED_OUT:
                return PlayTrackResult(
                    status=PlayTrackStatus.STARTING,
                    message=DiscordUIMessages.PLAY_STARTING.format(title=track.title),
                    track=track,
                    queue_position=0,
                    queue_length=session.queue_length,
                )
            case AdvanceStatus.FAILED:
                return PlayTrackResult.error(
                    PlayTrackStatus.FAILED,
                    DiscordUIMessages.PLAY_FAILED.format(
                        title=track.title, reason=outcome.message
                    ),
                    track=track,
                    error_kind=outcome.error_kind,
                )
            case _:
                return PlayTrackResult.error(
                    PlayTrackStatus.CANCELLED,
                    DiscordUIMessages.PLAY_CANCELLED.format(title=track.title),
                    track=track,
                )
