"""YouTube oEmbed metadata backend over aiohttp.

The cheapest and most permissive metadata source: no duration, but it keeps
working when the extractor-based backends are blocked.
"""

from __future__ import annotations

import logging
from typing import Final

import aiohttp

from discord_jukebox.application.interfaces.audio_resolver import MetadataBackend
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.infrastructure.audio.models import USER_AGENT, OEmbedInfo

logger = logging.getLogger(__name__)

OEMBED_ENDPOINT: Final[str] = "https://www.youtube.com/oembed"
DEFAULT_HTTP_TIMEOUT: Final[float] = 5.0


class OEmbedBackend(MetadataBackend):
    name = "oembed"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT}, timeout=self._timeout
            )
            self._owns_session = True
        return self._session

    async def fetch_metadata(self, url: str) -> Track | None:
        params = {"url": url, "format": "json"}
        async with self._get_session().get(OEMBED_ENDPOINT, params=params) as resp:
            if resp.status != 200:
                # 401/404 mean private or missing; nothing to report upward.
                logger.debug(LogTemplates.OEMBED_HTTP_STATUS, resp.status, url)
                return None
            data = await resp.json(content_type=None)

        if not isinstance(data, dict):
            return None
        return OEmbedInfo.model_validate(data).to_track(url)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
