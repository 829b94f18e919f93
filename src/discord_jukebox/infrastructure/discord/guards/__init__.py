"""Interaction guard functions for Discord cogs."""

from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_guild_id,
    get_member,
    get_user_voice_channel,
    send_ephemeral,
)

__all__ = [
    "get_guild_id",
    "get_member",
    "get_user_voice_channel",
    "send_ephemeral",
]
