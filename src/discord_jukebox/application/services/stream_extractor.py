"""Opens a live audio stream for a track URL by trying backends in order."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from discord_jukebox.domain.music.error_classifier import classify, describe
from discord_jukebox.domain.music.exceptions import ExtractionFailedError
from discord_jukebox.domain.music.value_objects import ExtractionAttempt
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ..interfaces.stream_backend import AudioStream, StreamBackend

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPT_TIMEOUT: Final[float] = 20.0


class StreamExtractor:
    """Fallback chain over stream backends.

    Backends are tried strictly in the order given, each under its own
    timeout. The first success is returned immediately. When all of them
    fail, the concatenated raw errors are classified and an
    :class:`ExtractionFailedError` carrying only the stable message is raised.
    """

    def __init__(
        self,
        *,
        backends: Sequence[StreamBackend],
        attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT,
    ) -> None:
        if not backends:
            raise ValueError(ErrorMessages.NO_STREAM_BACKENDS)
        self._backends = tuple(backends)
        self._attempt_timeout = attempt_timeout

    @property
    def backend_names(self) -> list[str]:
        return [backend.name for backend in self._backends]

    async def open_stream(self, source_url: str) -> AudioStream:
        attempts: list[ExtractionAttempt] = []

        for backend in self._backends:
            logger.debug(LogTemplates.EXTRACTION_ATTEMPT, source_url, backend.name)
            try:
                async with asyncio.timeout(self._attempt_timeout):
                    stream = await backend.open(source_url)
            except TimeoutError:
                raw_error = ErrorMessages.BACKEND_TIMED_OUT.format(seconds=self._attempt_timeout)
            except Exception as e:
                raw_error = str(e) or type(e).__name__
            else:
                logger.info(LogTemplates.EXTRACTION_SUCCEEDED, source_url, backend.name)
                return stream

            attempts.append(ExtractionAttempt(backend=backend.name, raw_error=raw_error))
            logger.warning(
                LogTemplates.EXTRACTION_BACKEND_FAILED, backend.name, source_url, raw_error
            )

        combined = " | ".join(str(attempt) for attempt in attempts)
        kind = classify(combined)
        logger.error(LogTemplates.EXTRACTION_EXHAUSTED, source_url, kind.value, combined)
        raise ExtractionFailedError(kind=kind, detail=describe(kind), attempts=tuple(attempts))
