"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice adapters)
- Audio (yt-dlp, ytmusicapi and oEmbed backends)
"""

from discord_jukebox.infrastructure.discord.adapters.voice_adapter import (
    DiscordAudioSink,
    DiscordVoiceConnector,
)
from discord_jukebox.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordAudioSink",
    "DiscordVoiceConnector",
]
