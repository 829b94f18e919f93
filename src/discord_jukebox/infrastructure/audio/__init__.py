"""Audio infrastructure - yt-dlp, ytmusicapi and oEmbed backends."""

from discord_jukebox.infrastructure.audio.models import (
    ExtractorArgs,
    OEmbedInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
    YtMusicSearchHit,
    YouTubeExtractorConfig,
)
from discord_jukebox.infrastructure.audio.oembed_backend import OEmbedBackend
from discord_jukebox.infrastructure.audio.pipe_backend import YtDlpPipeBackend
from discord_jukebox.infrastructure.audio.ytdlp_backend import (
    YtDlpMetadataBackend,
    YtDlpSearchBackend,
    YtDlpStreamBackend,
)
from discord_jukebox.infrastructure.audio.ytmusic_backend import YtMusicBackend

__all__ = [
    "ExtractorArgs",
    "OEmbedBackend",
    "OEmbedInfo",
    "YouTubeExtractorConfig",
    "YtDlpMetadataBackend",
    "YtDlpOpts",
    "YtDlpPipeBackend",
    "YtDlpSearchBackend",
    "YtDlpStreamBackend",
    "YtDlpTrackInfo",
    "YtMusicBackend",
    "YtMusicSearchHit",
]
