"""Slash-command music cog delegating to the application command handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.application.commands import (
    ControlAction,
    ControlPlaybackCommand,
    PlayTrackCommand,
    SetVolumeCommand,
    SkipTrackCommand,
    StopPlaybackCommand,
)
from discord_jukebox.application.queries import GetQueueQuery
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.discord.guards.voice_guards import (
    get_guild_id,
    get_user_voice_channel,
    send_ephemeral,
)
from discord_jukebox.utils.reply import format_duration_ms, truncate

if TYPE_CHECKING:
    from ....application.queries.get_queue import QueueInfo
    from ....config.container import Container

logger = logging.getLogger(__name__)

QUEUE_PREVIEW_SIZE = 10


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        channel = await get_user_voice_channel(interaction)
        if channel is None or interaction.guild is None:
            return

        # Joining and the first extraction both outlast the 3-second interaction deadline
        await interaction.response.defer()

        user = interaction.user
        command = PlayTrackCommand(
            guild_id=interaction.guild.id,
            channel_id=channel.id,
            requested_by=getattr(user, "display_name", None) or user.name,
            query=query,
        )

        try:
            result = await self.container.play_track_handler.handle(command)
        except Exception as e:
            logger.exception(LogTemplates.BOT_SLASH_COMMAND_ERROR, "play", e)
            await interaction.followup.send(DiscordUIMessages.ERROR_OCCURRED, ephemeral=True)
            return

        await interaction.followup.send(result.message, ephemeral=not result.is_success)

    @play.autocomplete("query")
    async def play_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        suggestions = await self.container.suggestion_service.suggest(current)
        return [app_commands.Choice(name=s.name, value=s.value) for s in suggestions]

    # ─────────────────────────────────────────────────────────────────
    # Controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, ControlAction.PAUSE)

    @app_commands.command(name="resume", description="Resume playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        await self._control(interaction, ControlAction.RESUME)

    async def _control(self, interaction: discord.Interaction, action: ControlAction) -> None:
        guild_id = await get_guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.control_playback_handler.handle(
            ControlPlaybackCommand(guild_id=guild_id, action=action)
        )
        await interaction.response.send_message(result.message, ephemeral=True)

    @app_commands.command(name="volume", description="Set the playback volume.")
    @app_commands.describe(percent="Volume from 0 to 100")
    async def volume(
        self,
        interaction: discord.Interaction,
        percent: app_commands.Range[int, 0, 100],
    ) -> None:
        guild_id = await get_guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.control_playback_handler.set_volume(
            SetVolumeCommand(guild_id=guild_id, percent=percent)
        )
        await interaction.response.send_message(result.message, ephemeral=True)

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        guild_id = await get_guild_id(interaction)
        if guild_id is None:
            return

        result = await self.container.skip_track_handler.handle(
            SkipTrackCommand(guild_id=guild_id)
        )
        await interaction.response.send_message(result.message, ephemeral=not result.is_success)

    @app_commands.command(name="stop", description="Stop playback, clear the queue and leave.")
    async def stop(self, interaction: discord.Interaction) -> None:
        guild_id = await get_guild_id(interaction)
        if guild_id is None:
            return

        # Disconnecting from voice can take a moment
        await interaction.response.defer(ephemeral=True)
        result = await self.container.stop_playback_handler.handle(
            StopPlaybackCommand(guild_id=guild_id)
        )
        await send_ephemeral(interaction, result.message)

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="queue", description="Show the current queue.")
    async def queue(self, interaction: discord.Interaction) -> None:
        guild_id = await get_guild_id(interaction)
        if guild_id is None:
            return

        info = await self.container.get_queue_handler.handle(GetQueueQuery(guild_id=guild_id))
        if info.is_empty:
            await interaction.response.send_message(
                DiscordUIMessages.STATE_QUEUE_EMPTY, ephemeral=True
            )
            return

        await interaction.response.send_message(embed=build_queue_embed(info), ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        bot_user = self.bot.user
        if bot_user is None or member.id != bot_user.id:
            return

        # Kicked or disconnected from outside: drop the session with the connection
        if before.channel is not None and after.channel is None:
            guild_id = member.guild.id
            if self.container.session_registry.get(guild_id) is None:
                return
            logger.info("Bot left voice in guild %s, stopping session", guild_id)
            await self.container.stop_playback_handler.handle(
                StopPlaybackCommand(guild_id=guild_id)
            )


def build_queue_embed(info: QueueInfo) -> discord.Embed:
    total = info.length + (1 if info.current_track is not None else 0)
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_QUEUE.format(total=total),
        color=discord.Color.blurple(),
    )

    if info.current_track is not None:
        embed.add_field(
            name=DiscordUIMessages.EMBED_NOW_PLAYING_FIELD,
            value=f"**{truncate(info.current_track.title)}** "
            f"`[{info.current_track.duration_formatted}]`",
            inline=False,
        )

    if info.tracks:
        lines = [
            f"{idx}. {truncate(track.title, 80)} `[{track.duration_formatted}]`"
            for idx, track in enumerate(info.tracks[:QUEUE_PREVIEW_SIZE], start=1)
        ]
        remaining = info.length - QUEUE_PREVIEW_SIZE
        if remaining > 0:
            lines.append(DiscordUIMessages.EMBED_QUEUE_MORE.format(count=remaining))
        embed.add_field(
            name=DiscordUIMessages.EMBED_UP_NEXT_FIELD,
            value="\n".join(lines),
            inline=False,
        )

    volume = round((info.volume or 0.0) * 100)
    embed.set_footer(
        text=DiscordUIMessages.EMBED_QUEUE_FOOTER.format(
            duration=format_duration_ms(info.total_duration_ms), volume=volume
        )
    )
    return embed


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
