"""YouTube Music backend (ytmusicapi) for song search and URL metadata."""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from typing import Any, Final

from pydantic import ValidationError
from ytmusicapi import YTMusic

from discord_jukebox.application.interfaces.audio_resolver import MetadataBackend, SearchBackend
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.infrastructure.audio.models import YtMusicSearchHit, has_title

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:[?&]v=|youtu\.be/|/embed/|/shorts/)([A-Za-z0-9_-]{11})"
)


def extract_video_id(url: str) -> str | None:
    match = VIDEO_ID_PATTERN.search(url)
    return match.group(1) if match else None


class YtMusicBackend(MetadataBackend, SearchBackend):
    """Unauthenticated ytmusicapi client used as the second search backend
    and the second metadata backend.

    ytmusicapi is synchronous, so every call runs in a worker thread. The
    client is created on first use.
    """

    name = "ytmusicapi"

    def __init__(self, client: YTMusic | None = None) -> None:
        self._client = client
        self._client_lock = threading.Lock()

    def _get_client(self) -> YTMusic:
        with self._client_lock:
            if self._client is None:
                self._client = YTMusic()
            return self._client

    def _search_sync(self, query: str, limit: int) -> list[dict[str, Any]]:
        results = self._get_client().search(query, filter="songs", limit=limit)
        return [r for r in results if isinstance(r, dict)]

    def _get_song_sync(self, video_id: str) -> dict[str, Any]:
        song = self._get_client().get_song(video_id)
        details = song.get("videoDetails") if isinstance(song, dict) else None
        return details if isinstance(details, dict) else {}

    async def search(self, query: str, limit: int = 1) -> list[Track]:
        raw_results = await asyncio.to_thread(self._search_sync, query, limit)

        tracks: list[Track] = []
        for raw in raw_results:
            try:
                hit = YtMusicSearchHit.model_validate(raw)
            except ValidationError:
                logger.debug(LogTemplates.YTMUSIC_SKIPPED_RESULT)
                continue
            tracks.append(hit.to_track())
            if len(tracks) >= limit:
                break
        return tracks

    async def fetch_metadata(self, url: str) -> Track | None:
        video_id = extract_video_id(url)
        if video_id is None:
            return None

        details = await asyncio.to_thread(self._get_song_sync, video_id)
        if not details.get("videoId") or not has_title(details):
            return None
        return YtMusicSearchHit.model_validate(details).to_track()
