import asyncio

import pytest

from discord_jukebox.application.interfaces.stream_backend import AudioStream
from discord_jukebox.application.interfaces.voice_adapter import AudioSink
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import SinkEvent, SinkEventKind

GUILD_ID = 111111111
CHANNEL_ID = 444444444


# ============================================================================
# Fakes
# ============================================================================


class FakeSink(AudioSink):
    """In-memory voice sink.

    Mirrors the discord.py sink: STARTED and ENDED are delivered on the next
    loop iteration, never inside ``play``/``stop`` themselves.
    """

    def __init__(self) -> None:
        self.handler = None
        self.played: list[tuple[AudioStream, float, str]] = []
        self.volumes: list[float] = []
        self.current_tag: str | None = None
        self.paused = False
        self.disconnected = False
        self.stop_calls = 0
        self.play_error: Exception | None = None

    def set_event_handler(self, handler) -> None:
        self.handler = handler

    async def play(self, stream: AudioStream, *, volume: float, tag: str) -> None:
        if self.play_error is not None:
            raise self.play_error
        self.played.append((stream, volume, tag))
        self.current_tag = tag
        self.paused = False
        asyncio.get_running_loop().call_soon(self._emit, SinkEvent(SinkEventKind.STARTED, tag))

    async def pause(self) -> bool:
        if self.current_tag is None or self.paused:
            return False
        self.paused = True
        return True

    async def resume(self) -> bool:
        if not self.paused:
            return False
        self.paused = False
        return True

    async def stop(self) -> None:
        self.stop_calls += 1
        tag = self.current_tag
        if tag is None:
            return
        self.current_tag = None
        self.paused = False
        asyncio.get_running_loop().call_soon(self._emit, SinkEvent(SinkEventKind.ENDED, tag))

    async def set_volume(self, volume: float) -> None:
        self.volumes.append(volume)

    async def disconnect(self) -> None:
        self.disconnected = True

    def finish(self) -> None:
        """Simulate the current stream running to its end."""
        tag = self.current_tag
        self.current_tag = None
        self._emit(SinkEvent(SinkEventKind.ENDED, tag or ""))

    def fail(self, error: str) -> None:
        tag = self.current_tag
        self.current_tag = None
        self._emit(SinkEvent(SinkEventKind.ERRORED, tag or "", error))

    def _emit(self, event: SinkEvent) -> None:
        if self.handler is not None:
            self.handler(event)


class FakeExtractor:
    """Scripted stand-in for StreamExtractor.

    ``failures`` maps a source URL to the exception its extraction raises;
    ``gates`` maps a URL to an event the extraction waits on first.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.streams: list[AudioStream] = []

    def gate(self, url: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[url] = event
        return event

    async def open_stream(self, source_url: str) -> AudioStream:
        self.calls.append(source_url)
        gate = self.gates.get(source_url)
        if gate is not None:
            await gate.wait()
        error = self.failures.get(source_url)
        if error is not None:
            raise error
        stream = AudioStream(backend="fake", url=f"{source_url}&stream=1")
        self.streams.append(stream)
        return stream


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for distinct tracks: make_track(1), make_track(2), ..."""

    def _make(n: int = 1, *, duration_ms: int = 180_000) -> Track:
        return Track(
            title=f"Test Song {n}",
            source_url=f"https://www.youtube.com/watch?v=video{n:06d}",
            duration_ms=duration_ms,
        )

    return _make


@pytest.fixture
def sample_track(make_track):
    """Create a sample track for testing."""
    return make_track(1)


@pytest.fixture
def fake_sink():
    return FakeSink()


@pytest.fixture
def sink_class():
    """The fake sink type, for tests that need one sink per connection."""
    return FakeSink


@pytest.fixture
def fake_extractor():
    return FakeExtractor()


@pytest.fixture
def settle():
    """Let callbacks and tasks scheduled on the loop run to completion."""

    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle


@pytest.fixture
def session_factory(fake_sink, fake_extractor):
    from discord_jukebox.application.services.playback_session import PlaybackSession

    def _make(*, max_queue_size: int = 10, volume: float = 0.5, on_closed=None) -> PlaybackSession:
        return PlaybackSession(
            guild_id=GUILD_ID,
            sink=fake_sink,
            extractor=fake_extractor,
            max_queue_size=max_queue_size,
            volume=volume,
            on_closed=on_closed,
        )

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    from discord_jukebox.config.settings import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()
