"""Lazy wiring of backends, the session registry and the command handlers.

Each property builds its component on first access. Backend lists are built
fresh so their order always follows the current settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.control_playback import ControlPlaybackHandler
    from ..application.commands.play_track import PlayTrackHandler
    from ..application.commands.skip_track import SkipTrackHandler
    from ..application.commands.stop_playback import StopPlaybackHandler
    from ..application.interfaces.audio_resolver import MetadataBackend, SearchBackend
    from ..application.interfaces.stream_backend import StreamBackend
    from ..application.interfaces.voice_adapter import VoiceConnector
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.services.search_resolver import SearchResolver
    from ..application.services.session_registry import SessionRegistry
    from ..application.services.stream_extractor import StreamExtractor
    from ..application.services.suggestion_service import SuggestionService
    from ..infrastructure.audio.oembed_backend import OEmbedBackend
    from ..infrastructure.audio.ytmusic_backend import YtMusicBackend
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _ytmusic_backend: YtMusicBackend | None = None
    _oembed_backend: OEmbedBackend | None = None
    _voice_connector: VoiceConnector | None = None

    # Application services
    _search_resolver: SearchResolver | None = None
    _stream_extractor: StreamExtractor | None = None
    _session_registry: SessionRegistry | None = None
    _suggestion_service: SuggestionService | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None
    _skip_track_handler: SkipTrackHandler | None = None
    _stop_playback_handler: StopPlaybackHandler | None = None
    _control_playback_handler: ControlPlaybackHandler | None = None

    # Query handlers
    _get_queue_handler: GetQueueHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Backends ===

    @property
    def ytmusic_backend(self) -> YtMusicBackend:
        if self._ytmusic_backend is None:
            from ..infrastructure.audio.ytmusic_backend import YtMusicBackend

            self._ytmusic_backend = YtMusicBackend()
        return self._ytmusic_backend

    @property
    def oembed_backend(self) -> OEmbedBackend:
        if self._oembed_backend is None:
            from ..infrastructure.audio.oembed_backend import OEmbedBackend

            self._oembed_backend = OEmbedBackend(
                timeout=self.settings.resolver.metadata_timeout_seconds
            )
        return self._oembed_backend

    @property
    def metadata_backends(self) -> list[MetadataBackend]:
        """Metadata backends in priority order: yt-dlp, ytmusicapi, oEmbed."""
        from ..infrastructure.audio.ytdlp_backend import YtDlpMetadataBackend

        return [
            YtDlpMetadataBackend(self.settings.audio),
            self.ytmusic_backend,
            self.oembed_backend,
        ]

    @property
    def search_backends(self) -> list[SearchBackend]:
        """Search backends in priority order: yt-dlp ytsearch, then ytmusicapi."""
        from ..infrastructure.audio.ytdlp_backend import YtDlpSearchBackend

        return [YtDlpSearchBackend(self.settings.audio), self.ytmusic_backend]

    @property
    def stream_backends(self) -> list[StreamBackend]:
        """Stream backends in priority order: yt-dlp, yt-dlp-android, yt-dlp-pipe."""
        from ..infrastructure.audio.pipe_backend import YtDlpPipeBackend
        from ..infrastructure.audio.ytdlp_backend import YtDlpStreamBackend

        audio = self.settings.audio
        return [
            YtDlpStreamBackend(audio, name="yt-dlp", player_clients=("web",)),
            YtDlpStreamBackend(
                audio,
                name="yt-dlp-android",
                player_clients=("android", "web"),
                use_pot_provider=True,
                use_cookies=False,
            ),
            YtDlpPipeBackend(audio),
        ]

    # === Infrastructure Adapters ===

    @property
    def voice_connector(self) -> VoiceConnector:
        """Get the voice connector."""
        if self._voice_connector is None:
            from ..infrastructure.discord.adapters.voice_adapter import (
                DiscordVoiceConnector,
            )

            self._voice_connector = DiscordVoiceConnector(self.bot, self.settings.audio)
        return self._voice_connector

    # === Application Services ===

    @property
    def search_resolver(self) -> SearchResolver:
        if self._search_resolver is None:
            from ..application.services.search_resolver import SearchResolver

            resolver_settings = self.settings.resolver
            self._search_resolver = SearchResolver(
                metadata_backends=self.metadata_backends,
                search_backends=self.search_backends,
                metadata_timeout=resolver_settings.metadata_timeout_seconds,
                search_timeout=resolver_settings.search_timeout_seconds,
            )
        return self._search_resolver

    @property
    def stream_extractor(self) -> StreamExtractor:
        if self._stream_extractor is None:
            from ..application.services.stream_extractor import StreamExtractor

            self._stream_extractor = StreamExtractor(
                backends=self.stream_backends,
                attempt_timeout=self.settings.resolver.extraction_timeout_seconds,
            )
        return self._stream_extractor

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..application.services.session_registry import SessionRegistry

            self._session_registry = SessionRegistry(
                extractor=self.stream_extractor,
                max_queue_size=self.settings.audio.max_queue_size,
                default_volume=self.settings.audio.default_volume,
            )
        return self._session_registry

    @property
    def suggestion_service(self) -> SuggestionService:
        if self._suggestion_service is None:
            from ..application.services.suggestion_service import SuggestionService

            resolver_settings = self.settings.resolver
            self._suggestion_service = SuggestionService(
                resolver=self.search_resolver,
                timeout=resolver_settings.suggestion_timeout_seconds,
                ttl_seconds=resolver_settings.suggestion_cache_ttl_seconds,
                max_size=resolver_settings.suggestion_cache_max_size,
            )
        return self._suggestion_service

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        """Get the play track command handler."""
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                resolver=self.search_resolver,
                registry=self.session_registry,
                connector=self.voice_connector,
                first_play_timeout=self.settings.resolver.first_play_timeout_seconds,
            )
        return self._play_track_handler

    @property
    def skip_track_handler(self) -> SkipTrackHandler:
        """Get the skip track command handler."""
        if self._skip_track_handler is None:
            from ..application.commands.skip_track import SkipTrackHandler

            self._skip_track_handler = SkipTrackHandler(registry=self.session_registry)
        return self._skip_track_handler

    @property
    def stop_playback_handler(self) -> StopPlaybackHandler:
        """Get the stop playback command handler."""
        if self._stop_playback_handler is None:
            from ..application.commands.stop_playback import StopPlaybackHandler

            self._stop_playback_handler = StopPlaybackHandler(registry=self.session_registry)
        return self._stop_playback_handler

    @property
    def control_playback_handler(self) -> ControlPlaybackHandler:
        """Get the pause/resume/volume command handler."""
        if self._control_playback_handler is None:
            from ..application.commands.control_playback import ControlPlaybackHandler

            self._control_playback_handler = ControlPlaybackHandler(
                registry=self.session_registry
            )
        return self._control_playback_handler

    # === Query Handlers ===

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        """Get the queue query handler."""
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(registry=self.session_registry)
        return self._get_queue_handler

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Stop every session and release network resources."""
        if self._session_registry is not None:
            await self._session_registry.close_all()

        if self._oembed_backend is not None:
            try:
                await self._oembed_backend.close()
            except Exception as exc:
                logger.warning(LogTemplates.CONTAINER_OEMBED_CLOSE_FAILED, exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
