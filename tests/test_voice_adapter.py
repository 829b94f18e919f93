"""
Voice Adapter Tests

Tests for DiscordAudioSink (play, lifecycle events, controls) and
DiscordVoiceConnector (join, move and failure paths) against mocked
discord.py voice clients.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from discord_jukebox.application.interfaces.stream_backend import AudioStream
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.exceptions import JoinFailedError, SinkError
from discord_jukebox.domain.music.value_objects import SinkEventKind
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import (
    DiscordAudioSink,
    DiscordVoiceConnector,
    _format_headers,
)

GUILD_ID = 123
CHANNEL_ID = 456
FFMPEG_OPTIONS = {"before_options": "-reconnect 1", "options": "-vn"}


def _voice_client(*, connected=True, playing=False, paused=False):
    vc = MagicMock(spec=discord.VoiceClient)
    vc.guild = MagicMock()
    vc.guild.id = GUILD_ID
    vc.is_connected.return_value = connected
    vc.is_playing.return_value = playing
    vc.is_paused.return_value = paused
    vc.disconnect = AsyncMock()
    vc.move_to = AsyncMock()
    return vc


def _stream(**kwargs):
    closer = MagicMock()
    return AudioStream(backend="test", url="https://media.example/a", closer=closer, **kwargs)


@pytest.fixture
def events():
    return []


@pytest.fixture
async def sink(events):
    vc = _voice_client()
    sink = DiscordAudioSink(vc, loop=asyncio.get_running_loop(), ffmpeg_options=FFMPEG_OPTIONS)
    sink.set_event_handler(events.append)
    return sink


# =============================================================================
# DiscordAudioSink
# =============================================================================


class TestFormatHeaders:
    def test_empty(self):
        assert _format_headers({}) == ""

    def test_headers_joined_with_crlf(self):
        assert _format_headers({"User-Agent": "ua", "Cookie": "a=1"}) == (
            '-headers "User-Agent: ua\r\nCookie: a=1\r\n"'
        )


class TestCreateSource:
    async def test_url_source_includes_headers(self, sink):
        stream = _stream(http_headers={"User-Agent": "ua"})

        with patch.object(discord, "FFmpegPCMAudio") as ffmpeg, patch.object(
            discord, "PCMVolumeTransformer"
        ) as transformer:
            sink.create_source(stream, 0.4)

        args, kwargs = ffmpeg.call_args
        assert args[0] == "https://media.example/a"
        assert kwargs["before_options"].startswith("-reconnect 1 -headers")
        assert kwargs["options"] == "-vn"
        transformer.assert_called_once_with(ffmpeg.return_value, volume=0.4)

    async def test_pipe_source(self, sink):
        pipe = MagicMock()
        stream = AudioStream(backend="pipe", pipe=pipe)

        with patch.object(discord, "FFmpegPCMAudio") as ffmpeg, patch.object(
            discord, "PCMVolumeTransformer"
        ):
            sink.create_source(stream, 0.5)

        ffmpeg.assert_called_once_with(pipe, pipe=True, options="-vn")


class TestSinkPlay:
    async def test_play_emits_started_after_return(self, sink, events):
        stream = _stream()

        with patch.object(sink, "create_source") as create_source:
            await sink.play(stream, volume=0.5, tag="item-1")
            assert events == []
            await asyncio.sleep(0)

        sink.voice_client.play.assert_called_once()
        assert sink.voice_client.play.call_args.args[0] is create_source.return_value
        assert [(e.kind, e.tag) for e in events] == [(SinkEventKind.STARTED, "item-1")]

    async def test_after_callback_closes_stream_and_reports_end(self, sink, events):
        stream = _stream()

        with patch.object(sink, "create_source"):
            await sink.play(stream, volume=0.5, tag="item-1")
        after = sink.voice_client.play.call_args.kwargs["after"]

        after(None)
        await asyncio.sleep(0)

        assert stream.closed
        stream.closer.assert_called_once()
        assert events[-1].kind is SinkEventKind.ENDED
        assert events[-1].tag == "item-1"

    async def test_after_callback_with_error(self, sink, events):
        with patch.object(sink, "create_source"):
            await sink.play(_stream(), volume=0.5, tag="item-1")

        sink.voice_client.play.call_args.kwargs["after"](RuntimeError("ffmpeg died"))
        await asyncio.sleep(0)

        assert events[-1].kind is SinkEventKind.ERRORED
        assert events[-1].error == "ffmpeg died"

    async def test_after_callback_from_another_thread(self, sink, events):
        with patch.object(sink, "create_source"):
            await sink.play(_stream(), volume=0.5, tag="item-1")
        after = sink.voice_client.play.call_args.kwargs["after"]

        await asyncio.to_thread(after, None)
        await asyncio.sleep(0)

        assert events[-1].kind is SinkEventKind.ENDED

    async def test_play_when_disconnected(self, sink):
        sink.voice_client.is_connected.return_value = False
        stream = _stream()

        with pytest.raises(SinkError):
            await sink.play(stream, volume=0.5, tag="item-1")

        assert stream.closed

    async def test_client_exception_becomes_sink_error(self, sink):
        sink.voice_client.play.side_effect = discord.ClientException("Already playing audio.")
        stream = _stream()

        with patch.object(sink, "create_source"):
            with pytest.raises(SinkError):
                await sink.play(stream, volume=0.5, tag="item-1")

        assert stream.closed

    async def test_play_interrupts_previous_source(self, sink):
        sink.voice_client.is_playing.return_value = True

        with patch.object(sink, "create_source"):
            await sink.play(_stream(), volume=0.5, tag="item-2")

        sink.voice_client.stop.assert_called_once()

    async def test_handler_errors_are_contained(self, sink):
        sink.set_event_handler(MagicMock(side_effect=RuntimeError("bad handler")))

        with patch.object(sink, "create_source"):
            await sink.play(_stream(), volume=0.5, tag="item-1")
        await asyncio.sleep(0)


class TestSinkControls:
    async def test_pause_only_when_playing(self, sink):
        assert await sink.pause() is False

        sink.voice_client.is_playing.return_value = True
        assert await sink.pause() is True
        sink.voice_client.pause.assert_called_once()

    async def test_resume_only_when_paused(self, sink):
        assert await sink.resume() is False

        sink.voice_client.is_paused.return_value = True
        assert await sink.resume() is True
        sink.voice_client.resume.assert_called_once()

    async def test_stop(self, sink):
        await sink.stop()
        sink.voice_client.stop.assert_not_called()

        sink.voice_client.is_paused.return_value = True
        await sink.stop()
        sink.voice_client.stop.assert_called_once()

    async def test_set_volume_on_transformer(self, sink):
        source = MagicMock(spec=discord.PCMVolumeTransformer)
        sink.voice_client.source = source

        await sink.set_volume(0.25)

        assert source.volume == 0.25

    async def test_disconnect(self, sink):
        await sink.disconnect()

        sink.voice_client.disconnect.assert_awaited_once_with(force=True)


# =============================================================================
# DiscordVoiceConnector
# =============================================================================


@pytest.fixture
def channel():
    ch = MagicMock(spec=discord.VoiceChannel)
    ch.id = CHANNEL_ID
    ch.name = "General"
    ch.connect = AsyncMock(return_value=_voice_client())
    return ch


@pytest.fixture
def guild(channel):
    g = MagicMock()
    g.id = GUILD_ID
    g.name = "Test Guild"
    g.voice_client = None
    g.get_channel.return_value = channel
    g.change_voice_state = AsyncMock()
    return g


@pytest.fixture
def bot(guild):
    b = MagicMock()
    b.get_guild.return_value = guild
    return b


class TestVoiceConnector:
    async def test_connect_new(self, bot, guild, channel):
        connector = DiscordVoiceConnector(bot, AudioSettings())

        sink = await connector.connect(GUILD_ID, CHANNEL_ID)

        assert isinstance(sink, DiscordAudioSink)
        channel.connect.assert_awaited_once_with(self_deaf=True)
        guild.change_voice_state.assert_awaited_once_with(channel=channel, self_deaf=True)

    async def test_reuses_client_in_same_channel(self, bot, guild, channel):
        vc = _voice_client()
        vc.channel = MagicMock()
        vc.channel.id = CHANNEL_ID
        guild.voice_client = vc

        sink = await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

        assert sink.voice_client is vc
        channel.connect.assert_not_awaited()
        vc.move_to.assert_not_awaited()

    async def test_moves_to_other_channel(self, bot, guild, channel):
        vc = _voice_client()
        vc.channel = MagicMock()
        vc.channel.id = 999
        guild.voice_client = vc

        await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

        vc.move_to.assert_awaited_once_with(channel)

    async def test_stale_client_is_replaced(self, bot, guild, channel):
        stale = _voice_client(connected=False)
        guild.voice_client = stale

        await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

        stale.disconnect.assert_awaited_once_with(force=True)
        channel.connect.assert_awaited_once()

    async def test_unknown_guild(self, bot):
        bot.get_guild.return_value = None

        with pytest.raises(JoinFailedError):
            await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

    async def test_text_channel_rejected(self, bot, guild):
        guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        with pytest.raises(JoinFailedError):
            await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

    async def test_forbidden(self, bot, channel):
        response = MagicMock(status=403, reason="Forbidden")
        channel.connect.side_effect = discord.Forbidden(response, "Missing Permissions")

        with pytest.raises(JoinFailedError) as exc_info:
            await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

        assert exc_info.value.channel_id == CHANNEL_ID

    async def test_timeout(self, bot, channel):
        channel.connect.side_effect = TimeoutError()

        with pytest.raises(JoinFailedError):
            await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

    async def test_client_exception(self, bot, channel):
        channel.connect.side_effect = discord.ClientException("Already connected")

        with pytest.raises(JoinFailedError):
            await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

    async def test_self_deafen_failure_is_ignored(self, bot, guild):
        guild.change_voice_state.side_effect = RuntimeError("gateway hiccup")

        sink = await DiscordVoiceConnector(bot).connect(GUILD_ID, CHANNEL_ID)

        assert isinstance(sink, DiscordAudioSink)
