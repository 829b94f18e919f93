"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization and caching of services and handlers
- Bot instance management (set_bot, bot property, error when not set)
- Backend chains in priority order
- Shared session registry across handlers
- Shutdown of sessions and the oEmbed HTTP session
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_jukebox.application.commands.control_playback import ControlPlaybackHandler
from discord_jukebox.application.commands.play_track import PlayTrackHandler
from discord_jukebox.application.commands.skip_track import SkipTrackHandler
from discord_jukebox.application.commands.stop_playback import StopPlaybackHandler
from discord_jukebox.application.queries.get_queue import GetQueueHandler
from discord_jukebox.application.services.search_resolver import SearchResolver
from discord_jukebox.application.services.session_registry import SessionRegistry
from discord_jukebox.application.services.stream_extractor import StreamExtractor
from discord_jukebox.application.services.suggestion_service import SuggestionService
from discord_jukebox.config.container import Container, create_container
from discord_jukebox.config.settings import Settings
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceConnector


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def container(settings):
    """Create container with default settings."""
    return Container(settings=settings)


@pytest.fixture
def mock_bot():
    """Mock Discord bot instance."""
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = 123456789
    return bot


# =============================================================================
# Container Initialization Tests
# =============================================================================


class TestContainerInitialization:
    """Unit tests for Container initialization."""

    def test_create_container_factory(self, settings):
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings

    def test_initial_state_all_none(self, container):
        """Nothing is built until first accessed."""
        assert container._bot is None
        assert container._ytmusic_backend is None
        assert container._oembed_backend is None
        assert container._voice_connector is None
        assert container._search_resolver is None
        assert container._stream_extractor is None
        assert container._session_registry is None
        assert container._suggestion_service is None
        assert container._play_track_handler is None
        assert container._get_queue_handler is None


# =============================================================================
# Bot Instance Management Tests
# =============================================================================


class TestBotManagement:
    def test_set_bot(self, container, mock_bot):
        container.set_bot(mock_bot)
        assert container.bot is mock_bot

    def test_get_bot_when_not_set_raises_error(self, container):
        with pytest.raises(RuntimeError, match="Bot not initialized"):
            _ = container.bot

    def test_voice_connector_requires_bot(self, container):
        with pytest.raises(RuntimeError):
            _ = container.voice_connector


# =============================================================================
# Backend Chains
# =============================================================================


class TestBackendChains:
    def test_metadata_backend_order(self, container):
        names = [backend.name for backend in container.metadata_backends]
        assert names == ["yt-dlp", "ytmusicapi", "oembed"]

    def test_search_backend_order(self, container):
        names = [backend.name for backend in container.search_backends]
        assert names == ["yt-dlp", "ytmusicapi"]

    def test_stream_backend_order(self, container):
        names = [backend.name for backend in container.stream_backends]
        assert names == ["yt-dlp", "yt-dlp-android", "yt-dlp-pipe"]

    def test_ytmusic_backend_shared(self, container):
        assert container.metadata_backends[1] is container.search_backends[1]


# =============================================================================
# Services and Handlers
# =============================================================================


class TestLazyServices:
    @pytest.mark.parametrize(
        ("attribute", "expected_type"),
        [
            ("search_resolver", SearchResolver),
            ("stream_extractor", StreamExtractor),
            ("session_registry", SessionRegistry),
            ("suggestion_service", SuggestionService),
            ("skip_track_handler", SkipTrackHandler),
            ("stop_playback_handler", StopPlaybackHandler),
            ("control_playback_handler", ControlPlaybackHandler),
            ("get_queue_handler", GetQueueHandler),
        ],
    )
    def test_lazy_initialization_and_caching(self, container, attribute, expected_type):
        first = getattr(container, attribute)
        second = getattr(container, attribute)

        assert isinstance(first, expected_type)
        assert first is second

    def test_play_track_handler_wires_voice_connector(self, container, mock_bot):
        container.set_bot(mock_bot)

        handler = container.play_track_handler

        assert isinstance(handler, PlayTrackHandler)
        assert isinstance(container.voice_connector, DiscordVoiceConnector)
        assert handler._connector is container.voice_connector
        assert handler._registry is container.session_registry
        assert handler._first_play_timeout == (
            container.settings.resolver.first_play_timeout_seconds
        )

    def test_handlers_share_session_registry(self, container, mock_bot):
        container.set_bot(mock_bot)

        registry = container.session_registry

        assert container.play_track_handler._registry is registry
        assert container.skip_track_handler._registry is registry
        assert container.stop_playback_handler._registry is registry
        assert container.get_queue_handler._registry is registry

    def test_extractor_uses_configured_timeout(self, container):
        extractor = container.stream_extractor

        assert extractor._attempt_timeout == (
            container.settings.resolver.extraction_timeout_seconds
        )
        assert len(extractor._backends) == 3


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycleShutdown:
    async def test_shutdown_without_components(self, container):
        # Nothing built yet; should not raise
        await container.shutdown()

    async def test_shutdown_closes_sessions(self, container):
        registry = MagicMock()
        registry.close_all = AsyncMock()
        container._session_registry = registry

        await container.shutdown()

        registry.close_all.assert_awaited_once()

    async def test_shutdown_closes_oembed(self, container):
        oembed = MagicMock()
        oembed.close = AsyncMock()
        container._oembed_backend = oembed

        await container.shutdown()

        oembed.close.assert_awaited_once()

    async def test_shutdown_handles_oembed_error(self, container):
        oembed = MagicMock()
        oembed.close = AsyncMock(side_effect=RuntimeError("close failed"))
        container._oembed_backend = oembed

        # Should not raise
        await container.shutdown()
