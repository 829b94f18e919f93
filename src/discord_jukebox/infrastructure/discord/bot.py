"""Discord bot wiring: container, music cog, guild allowlist and graceful shutdown."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING, Any

import discord
from discord import app_commands
from discord.ext import commands

from discord_jukebox.application.commands import StopPlaybackCommand
from discord_jukebox.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_jukebox.infrastructure.discord.guards.voice_guards import send_ephemeral

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

COGS = ("discord_jukebox.infrastructure.discord.cogs.music_cog",)


class JukeboxCommandTree(app_commands.CommandTree):
    """Command tree that only answers guilds listed in ``DISCORD__GUILD_IDS``.

    An empty allowlist accepts every guild.
    """

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        settings = getattr(self.client, "settings", None)
        guild_ids = settings.discord.guild_ids if settings is not None else ()
        if not guild_ids or interaction.guild_id is None or interaction.guild_id in guild_ids:
            return True

        logger.info(
            LogTemplates.BOT_GUILD_REJECTED,
            getattr(interaction.command, "name", "<unknown>"),
            interaction.guild_id,
        )
        if interaction.type is not discord.InteractionType.autocomplete:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_GUILD_NOT_ALLOWED)
        return False


class JukeboxBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs: Any,
    ) -> None:
        # Slash commands only; no message content or member intents
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            help_command=None,
            tree_cls=JukeboxCommandTree,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        self._shutdown_event = asyncio.Event()
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        await self._load_cogs()
        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            await self._sync_commands()

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _load_cogs(self) -> None:
        # A cog that fails to load aborts startup
        for cog in COGS:
            try:
                await self.load_extension(cog)
            except Exception as e:
                logger.exception(LogTemplates.BOT_COG_LOAD_FAILED, cog, e)
                raise
            logger.info(LogTemplates.BOT_COG_LOADED, cog)

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: Exception
    ) -> None:
        """Global slash-command error handler; replies ephemerally to avoid channel spam."""
        original = getattr(error, "original", error)
        logger.error(
            LogTemplates.BOT_SLASH_COMMAND_ERROR,
            getattr(interaction.command, "name", "<unknown>"),
            original,
            exc_info=original,
        )

        try:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_OCCURRED)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def _sync_commands(self) -> None:
        """Sync to the test guilds when configured (instant), otherwise globally."""
        test_guilds = self.settings.discord.test_guild_ids
        if not test_guilds:
            try:
                synced = await self.tree.sync()
                logger.info(LogTemplates.BOT_SYNCED_GLOBAL, len(synced))
            except discord.HTTPException as e:
                logger.warning(LogTemplates.BOT_SYNC_GLOBAL_FAILED, e)
            return

        for guild_id in test_guilds:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            try:
                synced = await self.tree.sync(guild=guild)
                logger.info(LogTemplates.BOT_SYNCED_GUILD, len(synced), guild_id)
            except discord.HTTPException as e:
                logger.warning(LogTemplates.BOT_SYNC_GUILD_FAILED, guild_id, e)

    async def on_ready(self) -> None:
        user = self.user
        logger.info(LogTemplates.BOT_READY, user, getattr(user, "id", "?"))
        logger.info(LogTemplates.BOT_CONNECTED_GUILDS, len(self.guilds))

        activity = discord.Activity(type=discord.ActivityType.listening, name="/play")
        await self.change_presence(activity=activity)

    async def on_guild_remove(self, guild: discord.Guild) -> None:
        if self.container.session_registry.get(guild.id) is None:
            return
        logger.info(LogTemplates.BOT_GUILD_REMOVED, guild.id)
        await self.container.stop_playback_handler.handle(StopPlaybackCommand(guild_id=guild.id))

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)

        # Stopping the sessions disconnects their voice clients
        try:
            await self.container.shutdown()
            logger.info(LogTemplates.BOT_CONTAINER_SHUTDOWN)
        except Exception as e:
            logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, e)

        await super().close()
        self._shutdown_event.set()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        """Run until SIGINT/SIGTERM, giving sessions ``shutdown_timeout`` seconds to close."""

        async def _graceful_close() -> None:
            try:
                await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
            except TimeoutError:
                logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

        async def runner() -> None:
            async with self:
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(_graceful_close()))
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> JukeboxBot:
    return JukeboxBot(container=container, settings=settings)
