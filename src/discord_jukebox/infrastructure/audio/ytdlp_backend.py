"""yt-dlp backends for metadata lookup, free-text search and stream extraction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.audio_resolver import MetadataBackend, SearchBackend
from discord_jukebox.application.interfaces.stream_backend import AudioStream, StreamBackend
from discord_jukebox.application.services.search_resolver import is_video_url
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.models import (
    ExtractorArgs,
    PotProviderConfig,
    YouTubeExtractorConfig,
    YtDlpOpts,
    YtDlpTrackInfo,
    has_title,
)

logger = logging.getLogger(__name__)


def resolve_cookie_file(settings: AudioSettings) -> str | None:
    """Return the configured cookie file path if it exists on disk."""
    cookie_file = settings.cookie_file
    if cookie_file is None:
        return None
    if not cookie_file.is_file():
        logger.warning(LogTemplates.YTDLP_COOKIES_MISSING, cookie_file)
        return None
    logger.info(LogTemplates.YTDLP_COOKIES_CONFIGURED, cookie_file)
    return str(cookie_file)


def _extract_sync(opts: YtDlpOpts, url: str, *, process: bool = True) -> dict[str, Any] | None:
    with YoutubeDL(params=cast(Any, opts.to_params())) as ydl:
        data = ydl.extract_info(url, download=False, process=process)
    return dict(data) if isinstance(data, dict) else None


def _parse_entries(data: dict[str, Any] | None) -> list[YtDlpTrackInfo]:
    if data is None:
        return []
    entries = data.get("entries") or []
    infos: list[YtDlpTrackInfo] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            infos.append(YtDlpTrackInfo.model_validate(entry))
        except ValueError:
            logger.debug(LogTemplates.YTDLP_FAILED_PARSE, exc_info=True)
    return infos


class YtDlpMetadataBackend(MetadataBackend):
    """Reads title and duration for a video URL without selecting formats."""

    name = "yt-dlp"

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(cookiefile=resolve_cookie_file(self._settings))

    async def fetch_metadata(self, url: str) -> Track | None:
        data = await asyncio.to_thread(_extract_sync, self._opts, url, process=False)
        if data is None or not has_title(data):
            return None
        return YtDlpTrackInfo.model_validate(data).to_track()


class YtDlpSearchBackend(SearchBackend):
    """``ytsearchN:`` with flat extraction, so only the result page is fetched."""

    name = "yt-dlp"

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(extract_flat="in_playlist")

    async def search(self, query: str, limit: int = 1) -> list[Track]:
        data = await asyncio.to_thread(_extract_sync, self._opts, f"ytsearch{limit}:{query}")
        tracks: list[Track] = []
        for info in _parse_entries(data):
            track = info.to_track()
            if track is not None:
                tracks.append(track)
        return tracks


class YtDlpStreamBackend(StreamBackend):
    """In-process yt-dlp extraction of a direct media URL for FFmpeg.

    One instance per player-client strategy: the plain web client with
    cookies, and the android/web clients backed by the PO-token provider.
    """

    def __init__(
        self,
        settings: AudioSettings | None = None,
        *,
        name: str = "yt-dlp",
        player_clients: Sequence[str] = ("web",),
        use_pot_provider: bool = False,
        use_cookies: bool = True,
    ) -> None:
        self._settings = settings or AudioSettings()
        self.name = name

        pot_provider = None
        if use_pot_provider and self._settings.pot_server_url:
            pot_provider = PotProviderConfig(base_url=[self._settings.pot_server_url])
            logger.info(LogTemplates.YTDLP_POT_CONFIGURED, self._settings.pot_server_url)

        self._opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            cookiefile=resolve_cookie_file(self._settings) if use_cookies else None,
            extractor_args=ExtractorArgs(
                youtube=YouTubeExtractorConfig(player_client=list(player_clients)),
                pot_provider=pot_provider,
            ),
        )

    @property
    def opts(self) -> YtDlpOpts:
        return self._opts

    async def open(self, url: str) -> AudioStream:
        if not is_video_url(url):
            raise ValueError(ErrorMessages.UNSUPPORTED_URL.format(url=url))

        data = await asyncio.to_thread(_extract_sync, self._opts, url)
        if data is None:
            raise ValueError(ErrorMessages.NO_STREAM_URL_IN_INFO)

        info = YtDlpTrackInfo.model_validate(data)
        stream_url = info.stream_url()
        if not stream_url:
            raise ValueError(ErrorMessages.NO_STREAM_URL_IN_INFO)

        return AudioStream(
            backend=self.name,
            url=stream_url,
            title=info.title,
            http_headers=info.http_headers,
        )
