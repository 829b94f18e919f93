"""
Unit Tests for StreamExtractor

Tests for:
- strict backend order and first-success return
- per-attempt timeout
- classification of the combined failure text
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_jukebox.application.interfaces.stream_backend import AudioStream
from discord_jukebox.application.services.stream_extractor import StreamExtractor
from discord_jukebox.domain.music.exceptions import ExtractionFailedError
from discord_jukebox.domain.music.value_objects import ExtractionErrorKind
from discord_jukebox.domain.shared.messages import ExtractionMessages

URL = "https://www.youtube.com/watch?v=video000001"


def _backend(name, stream=None, side_effect=None):
    backend = MagicMock()
    backend.name = name
    backend.open = AsyncMock(return_value=stream, side_effect=side_effect)
    return backend


class TestStreamExtractor:
    def test_requires_backends(self):
        with pytest.raises(ValueError):
            StreamExtractor(backends=[])

    def test_backend_names(self):
        extractor = StreamExtractor(backends=[_backend("a"), _backend("b")])
        assert extractor.backend_names == ["a", "b"]

    async def test_first_success_short_circuits(self):
        stream = AudioStream(backend="yt-dlp", url="https://media.example/a.webm")
        first = _backend("yt-dlp", stream=stream)
        second = _backend("yt-dlp-pipe")
        extractor = StreamExtractor(backends=[first, second])

        assert await extractor.open_stream(URL) is stream
        second.open.assert_not_awaited()

    async def test_falls_through_in_order(self):
        calls = []
        stream = AudioStream(backend="pipe", url="https://media.example/b.webm")

        def _record(name, result=None, error=None):
            async def _open(url):
                calls.append(name)
                if error is not None:
                    raise error
                return result

            return _backend(name, side_effect=_open)

        extractor = StreamExtractor(
            backends=[
                _record("yt-dlp", error=RuntimeError("HTTP Error 403: Forbidden")),
                _record("yt-dlp-android", error=RuntimeError("Video unavailable")),
                _record("yt-dlp-pipe", result=stream),
            ]
        )

        assert await extractor.open_stream(URL) is stream
        assert calls == ["yt-dlp", "yt-dlp-android", "yt-dlp-pipe"]

    async def test_all_fail_is_classified(self):
        extractor = StreamExtractor(
            backends=[
                _backend("yt-dlp", side_effect=RuntimeError("Sign in to confirm you're not a bot")),
                _backend("yt-dlp-pipe", side_effect=RuntimeError("exit status 1")),
            ]
        )

        with pytest.raises(ExtractionFailedError) as exc_info:
            await extractor.open_stream(URL)

        error = exc_info.value
        assert error.kind is ExtractionErrorKind.BLOCKED
        assert error.detail == ExtractionMessages.BLOCKED
        assert [a.backend for a in error.attempts] == ["yt-dlp", "yt-dlp-pipe"]
        # Raw backend text never reaches the user-facing message
        assert "not a bot" not in str(error)

    async def test_timeout_counts_as_failure(self):
        async def _hang(url):
            await asyncio.sleep(10)

        extractor = StreamExtractor(
            backends=[_backend("slow", side_effect=_hang)], attempt_timeout=0.01
        )

        with pytest.raises(ExtractionFailedError) as exc_info:
            await extractor.open_stream(URL)

        assert exc_info.value.kind is ExtractionErrorKind.UNKNOWN
        assert "timed out" in exc_info.value.attempts[0].raw_error

    async def test_exception_without_text_uses_type_name(self):
        extractor = StreamExtractor(backends=[_backend("a", side_effect=KeyError())])

        with pytest.raises(ExtractionFailedError) as exc_info:
            await extractor.open_stream(URL)

        assert exc_info.value.attempts[0].raw_error
