"""Interaction guards shared by the jukebox slash commands."""

from __future__ import annotations

import discord

from discord_jukebox.domain.shared.messages import DiscordUIMessages


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """The invoking guild member, or None after telling the user the command is guild-only."""
    if not interaction.guild:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    user = interaction.user
    if not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None

    return user


async def get_user_voice_channel(
    interaction: discord.Interaction,
) -> discord.VoiceChannel | discord.StageChannel | None:
    """The channel the invoking member is connected to, or None with an error sent."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel = member.voice.channel if member.voice else None
    if channel is None:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        return None

    return channel


async def get_guild_id(interaction: discord.Interaction) -> int | None:
    if interaction.guild is None:
        await send_ephemeral(interaction, DiscordUIMessages.STATE_SERVER_ONLY)
        return None
    return interaction.guild.id
