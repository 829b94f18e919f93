"""discord.py implementations of the VoiceConnector and AudioSink ports."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

import discord

from discord_jukebox.application.interfaces.voice_adapter import (
    AudioSink,
    SinkEventHandler,
    VoiceConnector,
)
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.exceptions import JoinFailedError, SinkError
from discord_jukebox.domain.music.value_objects import SinkEvent, SinkEventKind
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.stream_backend import AudioStream

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: Final[float] = 10.0


def _format_headers(headers: dict[str, str]) -> str:
    """FFmpeg ``-headers`` argument for the request headers yt-dlp negotiated."""
    if not headers:
        return ""
    joined = "".join(f"{key}: {value}\r\n" for key, value in headers.items())
    escaped = joined.replace('"', '\\"')
    return f'-headers "{escaped}"'


class DiscordAudioSink(AudioSink):
    """Renders streams on one guild's ``discord.VoiceClient``.

    FFmpeg finishes on discord.py's audio thread; the ``after`` callback
    closes the stream there and hands the lifecycle event back to the event
    loop with ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        *,
        loop: asyncio.AbstractEventLoop,
        ffmpeg_options: dict[str, str],
    ) -> None:
        self._vc = voice_client
        self._loop = loop
        self._ffmpeg_options = ffmpeg_options
        self._handler: SinkEventHandler | None = None

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._vc

    @property
    def guild_id(self) -> int:
        return self._vc.guild.id

    def set_event_handler(self, handler: SinkEventHandler) -> None:
        self._handler = handler

    def create_source(self, stream: AudioStream, volume: float) -> discord.PCMVolumeTransformer:
        options = self._ffmpeg_options.get("options", "")
        if stream.pipe is not None:
            source = discord.FFmpegPCMAudio(stream.pipe, pipe=True, options=options)
        else:
            before_options = " ".join(
                part
                for part in (
                    self._ffmpeg_options.get("before_options", ""),
                    _format_headers(stream.http_headers),
                )
                if part
            )
            source = discord.FFmpegPCMAudio(
                stream.url, before_options=before_options, options=options
            )
        return discord.PCMVolumeTransformer(source, volume=volume)

    async def play(self, stream: AudioStream, *, volume: float, tag: str) -> None:
        if not self._vc.is_connected():
            stream.close()
            raise SinkError(ErrorMessages.SINK_NOT_CONNECTED.format(guild_id=self.guild_id))

        # The previous source still reports ENDED under its own tag.
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

        def after_callback(error: Exception | None = None) -> None:
            logger.debug(LogTemplates.VOICE_TRACK_ENDED, self.guild_id, error)
            try:
                stream.close()
            except Exception as e:
                logger.debug(LogTemplates.VOICE_STREAM_CLOSE_FAILED, e)

            if error is not None:
                event = SinkEvent(SinkEventKind.ERRORED, tag, str(error))
            else:
                event = SinkEvent(SinkEventKind.ENDED, tag)
            try:
                self._loop.call_soon_threadsafe(self._emit, event)
            except RuntimeError as e:
                # Loop already closed during shutdown.
                logger.debug(LogTemplates.VOICE_CALLBACK_FAILED, self.guild_id, e)

        try:
            source = self.create_source(stream, volume)
            self._vc.play(source, after=after_callback)
        except (discord.ClientException, OSError, TypeError) as e:
            stream.close()
            raise SinkError(ErrorMessages.VOICE_CLIENT_ERROR.format(error=e)) from e

        self._loop.call_soon(self._emit, SinkEvent(SinkEventKind.STARTED, tag))

    async def pause(self) -> bool:
        if self._vc.is_playing():
            self._vc.pause()
            return True
        return False

    async def resume(self) -> bool:
        if self._vc.is_paused():
            self._vc.resume()
            return True
        return False

    async def stop(self) -> None:
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()

    async def set_volume(self, volume: float) -> None:
        source = self._vc.source
        if isinstance(source, discord.PCMVolumeTransformer):
            source.volume = volume

    async def disconnect(self) -> None:
        if self._vc.is_connected():
            await self._vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)

    def _emit(self, event: SinkEvent) -> None:
        if self._handler is None:
            return
        try:
            self._handler(event)
        except Exception:
            logger.exception(LogTemplates.VOICE_CALLBACK_FAILED, self.guild_id, event)


class DiscordVoiceConnector(VoiceConnector):
    """Joins (or moves to) a guild voice channel and wraps the client in a sink."""

    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()

    def _get_voice_client(self, guild: discord.Guild) -> discord.VoiceClient | None:
        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    # TODO(integ): Exercise connect, move and permission-denied paths against a
    # real test guild; the unit tests only cover them with mocked channels.
    async def connect(self, guild_id: int, channel_id: int) -> DiscordAudioSink:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise JoinFailedError(
                channel_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id)
            )

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise JoinFailedError(
                channel_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        vc = self._get_voice_client(guild)
        if vc is not None and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await vc.disconnect(force=True)
            vc = None

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                if vc is None:
                    vc = await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
                elif vc.channel is None or vc.channel.id != channel_id:
                    await vc.move_to(channel)
                    logger.info(LogTemplates.VOICE_MOVED, channel.name)
        except TimeoutError as e:
            raise JoinFailedError(
                channel_id, ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            ) from e
        except discord.Forbidden as e:
            raise JoinFailedError(
                channel_id, ErrorMessages.VOICE_NO_PERMISSION.format(channel_id=channel_id)
            ) from e
        except discord.ClientException as e:
            raise JoinFailedError(
                channel_id, ErrorMessages.VOICE_CLIENT_ERROR.format(error=e)
            ) from e

        await self._ensure_self_deaf(guild, channel)
        return DiscordAudioSink(
            vc,
            loop=asyncio.get_running_loop(),
            ffmpeg_options=dict(self._settings.ffmpeg_options),
        )

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)
