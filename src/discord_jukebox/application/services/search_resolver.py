"""Resolves a free-text query or a video URL into one playable Track.

URLs go through the metadata backends in priority order, each under its own
timeout. Free text goes through the search backends in priority order; the
rank-0 result of the first backend that returns anything wins. Backend
failures are logged and treated as "nothing found" for that backend.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ..interfaces.audio_resolver import MetadataBackend, SearchBackend

logger = logging.getLogger(__name__)

DEFAULT_METADATA_TIMEOUT: Final[float] = 5.0
DEFAULT_SEARCH_LIMIT: Final[int] = 5

VIDEO_URL_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(
        r"^(https?://)?(www\.)?(youtube\.com|youtu\.be|music\.youtube\.com|m\.youtube\.com)/.+",
        re.IGNORECASE,
    ),
    re.compile(r"youtube\.com/watch\?v=", re.IGNORECASE),
    re.compile(r"youtu\.be/", re.IGNORECASE),
    re.compile(r"youtube\.com/embed/", re.IGNORECASE),
    re.compile(r"music\.youtube\.com/watch\?v=", re.IGNORECASE),
    re.compile(r"youtube\.com/shorts/", re.IGNORECASE),
)


def is_video_url(query: str) -> bool:
    """True when ``query`` is a recognized video URL rather than free text."""
    return any(pattern.search(query) for pattern in VIDEO_URL_PATTERNS)


def normalize_url(query: str) -> str:
    """Add the scheme that users often leave off (``youtu.be/abc``)."""
    if query.lower().startswith(("http://", "https://")):
        return query
    return f"https://{query}"


class SearchResolver:
    """Turns user input into a single Track via prioritized backends."""

    def __init__(
        self,
        *,
        metadata_backends: Sequence[MetadataBackend],
        search_backends: Sequence[SearchBackend],
        metadata_timeout: float = DEFAULT_METADATA_TIMEOUT,
        search_timeout: float | None = None,
    ) -> None:
        self._metadata_backends = tuple(metadata_backends)
        self._search_backends = tuple(search_backends)
        self._metadata_timeout = metadata_timeout
        self._search_timeout = search_timeout

    async def resolve(self, query: str, *, timeout: float | None = None) -> Track | None:
        """Return the best track for ``query``, or None when nothing was found.

        ``timeout`` caps each free-text search call; it falls back to the
        configured search timeout, where None means no cap.
        """
        query = query.strip()
        if not query:
            logger.debug(LogTemplates.RESOLVER_EMPTY_QUERY)
            return None

        if is_video_url(query):
            track = await self._resolve_url(normalize_url(query))
        else:
            results = await self._search(query, limit=1, timeout=timeout)
            track = results[0] if results else None

        if track is None:
            logger.info(LogTemplates.RESOLVER_NOT_FOUND, query)
        return track

    async def search(
        self,
        query: str,
        *,
        limit: int = DEFAULT_SEARCH_LIMIT,
        timeout: float | None = None,
    ) -> list[Track]:
        """Return up to ``limit`` candidates for free text, best first."""
        query = query.strip()
        if not query:
            return []
        return await self._search(query, limit=limit, timeout=timeout)

    async def _resolve_url(self, url: str) -> Track | None:
        for backend in self._metadata_backends:
            try:
                async with asyncio.timeout(self._metadata_timeout):
                    track = await backend.fetch_metadata(url)
            except TimeoutError:
                logger.warning(
                    LogTemplates.RESOLVER_METADATA_TIMEOUT,
                    backend.name,
                    self._metadata_timeout,
                    url,
                )
                continue
            except Exception as e:
                logger.warning(LogTemplates.RESOLVER_METADATA_FAILED, backend.name, url, e)
                continue

            if track is not None and track.title.strip():
                logger.debug(LogTemplates.RESOLVER_METADATA_HIT, backend.name, url)
                return track
            logger.debug(LogTemplates.RESOLVER_METADATA_EMPTY, backend.name, url)

        return None

    async def _search(self, query: str, *, limit: int, timeout: float | None) -> list[Track]:
        effective_timeout = timeout if timeout is not None else self._search_timeout

        for backend in self._search_backends:
            try:
                async with asyncio.timeout(effective_timeout):
                    results = await backend.search(query, limit)
            except TimeoutError:
                logger.warning(
                    LogTemplates.RESOLVER_SEARCH_TIMEOUT, backend.name, effective_timeout, query
                )
                continue
            except Exception as e:
                logger.warning(LogTemplates.RESOLVER_SEARCH_FAILED, backend.name, query, e)
                continue

            if results:
                logger.debug(LogTemplates.RESOLVER_SEARCH_HIT, backend.name, len(results), query)
                return results[:limit]
            logger.debug(LogTemplates.RESOLVER_SEARCH_EMPTY, backend.name, query)

        return []
