"""Pydantic models for backend data transformation and yt-dlp configuration.

These are infrastructure-specific models for parsing external yt-dlp,
ytmusicapi and oEmbed payloads and configuring yt-dlp options. Raw backend
shapes never leave this package; every model converts itself to a ``Track``.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.types import (
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeFloat,
    PositiveInt,
)

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
TITLE_MAX_LENGTH: Final[int] = 500
MAX_DURATION_MS: Final[int] = 86_400_000
UNKNOWN_TITLE: Final[str] = "Unknown Title"
USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
YOUTUBE_WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"


def _coerce_seconds(v: Any) -> float:
    """Coerce a seconds value from external data; garbage becomes 0 (unknown or live)."""
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        seconds = float(v)
    except (TypeError, ValueError):
        return 0.0
    return seconds if seconds > 0 else 0.0


def _http_or_none(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    v = v.strip()
    return v if v.startswith(("http://", "https://")) else None


def _clip_title(title: str) -> str:
    return title.strip()[:TITLE_MAX_LENGTH]


def has_title(data: dict[str, Any]) -> bool:
    """True when a raw payload carries a usable title.

    Metadata lookups must check this before parsing, since the parsed models
    substitute a placeholder title for search listings.
    """
    title = data.get("title")
    return isinstance(title, str) and bool(title.strip())


# ── yt-dlp data ─────────────────────────────────────────────────────


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    vcodec: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)

    @property
    def has_audio(self) -> bool:
        return bool(self.url) and self.acodec != "none"


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are silently ignored. Before-validators coerce
    garbage from external yt-dlp data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = UNKNOWN_TITLE
    duration: NonNegativeFloat = 0.0
    thumbnail: HttpUrlStr | None = None
    http_headers: dict[str, str] = Field(default_factory=dict)
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("webpage_url", "thumbnail", mode="before")
    @classmethod
    def _coerce_http(cls, v: Any) -> str | None:
        return _http_or_none(v)

    @field_validator("id", "url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float:
        return _coerce_seconds(v)

    @field_validator("http_headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            return {}
        return {str(k): str(val) for k, val in v.items()}

    @property
    def duration_ms(self) -> int:
        return min(int(self.duration * 1000), MAX_DURATION_MS)

    @property
    def page_url(self) -> str | None:
        """Canonical watch URL, rebuilt from the id for flat search entries."""
        if self.webpage_url:
            return self.webpage_url
        if self.url and self.url.startswith(("http://", "https://")):
            return self.url
        if self.id:
            return YOUTUBE_WATCH_URL.format(video_id=self.id)
        return None

    def stream_url(self) -> str | None:
        """Direct media URL: the selected format's url, else the last audio format."""
        if self.url:
            return self.url
        audio_formats = [f for f in self.formats if f.has_audio]
        if audio_formats:
            return audio_formats[-1].url
        return None

    def to_track(self) -> Track | None:
        page_url = self.page_url
        if page_url is None:
            return None
        return Track(
            title=_clip_title(self.title),
            source_url=page_url,
            duration_ms=self.duration_ms,
            thumbnail_url=self.thumbnail,
        )


# ── ytmusicapi data ─────────────────────────────────────────────────


class YtMusicSearchHit(BaseModel):
    """One ``YTMusic.search(filter="songs")`` result, or a ``get_song`` video detail."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    video_id: NonEmptyStr = Field(validation_alias=AliasChoices("videoId", "video_id"))
    title: NonEmptyStr = UNKNOWN_TITLE
    artists: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("artists", "author")
    )
    duration_seconds: NonNegativeFloat = Field(
        default=0.0, validation_alias=AliasChoices("duration_seconds", "lengthSeconds")
    )
    thumbnail_url: HttpUrlStr | None = Field(
        default=None, validation_alias=AliasChoices("thumbnails", "thumbnail", "thumbnail_url")
    )

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return UNKNOWN_TITLE
        return v

    @field_validator("artists", mode="before")
    @classmethod
    def _artist_names(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list):
            return []
        names = []
        for artist in v:
            name = artist.get("name") if isinstance(artist, dict) else artist
            if isinstance(name, str) and name.strip():
                names.append(name.strip())
        return names

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float:
        return _coerce_seconds(v)

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _largest_thumbnail(cls, v: Any) -> str | None:
        # ytmusicapi lists thumbnails smallest first; both search results and
        # videoDetails wrap them differently.
        if isinstance(v, dict):
            v = v.get("thumbnails", [])
        if isinstance(v, list):
            urls = [t.get("url") for t in v if isinstance(t, dict)]
            v = urls[-1] if urls else None
        return _http_or_none(v)

    @property
    def duration_ms(self) -> int:
        return min(int(self.duration_seconds * 1000), MAX_DURATION_MS)

    @property
    def display_title(self) -> str:
        if self.artists:
            return f"{', '.join(self.artists)} - {self.title}"
        return self.title

    def to_track(self) -> Track:
        return Track(
            title=_clip_title(self.display_title),
            source_url=YOUTUBE_WATCH_URL.format(video_id=self.video_id),
            duration_ms=self.duration_ms,
            thumbnail_url=self.thumbnail_url,
        )


# ── oEmbed data ─────────────────────────────────────────────────────


class OEmbedInfo(BaseModel):
    """YouTube oEmbed response. It carries no duration."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = ""
    author_name: str | None = None
    thumbnail_url: HttpUrlStr | None = None

    @field_validator("thumbnail_url", mode="before")
    @classmethod
    def _coerce_http(cls, v: Any) -> str | None:
        return _http_or_none(v)

    def to_track(self, source_url: str) -> Track | None:
        if not self.title.strip():
            return None
        return Track(
            title=_clip_title(self.title),
            source_url=source_url,
            thumbnail_url=self.thumbnail_url,
        )


# ── yt-dlp option models ───────────────────────────────────────────


class YouTubeExtractorConfig(BaseModel):
    """YouTube-specific yt-dlp extractor arguments."""

    model_config = ConfigDict(frozen=True)

    player_client: list[NonEmptyStr] = Field(
        default_factory=lambda: ["android", "web"], min_length=1,
    )


class PotProviderConfig(BaseModel):
    """bgutil-ytdlp-pot-provider HTTP server location."""

    model_config = ConfigDict(frozen=True)

    base_url: list[HttpUrlStr] = Field(min_length=1)


class ExtractorArgs(BaseModel):
    """Container for yt-dlp extractor arguments."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    youtube: YouTubeExtractorConfig
    pot_provider: PotProviderConfig | None = Field(
        default=None, serialization_alias="youtubepot-bgutilhttp"
    )


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
    cookiefile: NonEmptyStr | None = None
    http_headers: dict[str, str] = Field(default_factory=lambda: {"User-Agent": USER_AGENT})
    extractor_args: ExtractorArgs | None = None

    def to_params(self) -> dict[str, Any]:
        """Options as the plain dict YoutubeDL expects, without unset keys."""
        return self.model_dump(exclude_none=True, by_alias=True)
