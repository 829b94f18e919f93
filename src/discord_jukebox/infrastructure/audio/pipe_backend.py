"""Last-resort stream backend: the yt-dlp CLI writing audio to stdout.

FFmpeg reads the subprocess stdout directly (``pipe=True``), so no media URL
ever has to be fetched by a second client. The attempt only succeeds once
the process has produced its first byte.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import IO, Final

from discord_jukebox.application.interfaces.stream_backend import AudioStream, StreamBackend
from discord_jukebox.application.services.search_resolver import is_video_url
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.models import USER_AGENT
from discord_jukebox.infrastructure.audio.ytdlp_backend import resolve_cookie_file

logger = logging.getLogger(__name__)

PROCESS_WAIT_TIMEOUT: Final[float] = 1.0
STDERR_TAIL: Final[int] = 500


class PipeProcess:
    """Owns one yt-dlp subprocess; ``kill`` is idempotent."""

    def __init__(self, process: subprocess.Popen[bytes]) -> None:
        self._process = process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stdout(self) -> IO[bytes] | None:
        return self._process.stdout

    def peek_first_byte(self) -> bool:
        """Block until the process writes audio or exits; True when audio is ready."""
        stdout = self._process.stdout
        if stdout is None:
            return False
        return bool(stdout.peek(1))

    def exit_details(self) -> tuple[int | None, str]:
        try:
            self._process.wait(timeout=PROCESS_WAIT_TIMEOUT)
        except subprocess.TimeoutExpired:
            pass
        stderr = b""
        if self._process.stderr is not None:
            stderr = self._process.stderr.read() or b""
        return self._process.returncode, stderr.decode(errors="replace").strip()[-STDERR_TAIL:]

    def kill(self) -> None:
        if self._process.poll() is None:
            try:
                self._process.kill()
                self._process.wait(timeout=PROCESS_WAIT_TIMEOUT)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.debug(LogTemplates.VOICE_STREAM_CLOSE_FAILED, e)
            logger.debug(LogTemplates.YTDLP_PIPE_KILLED, self.pid)

        for stream in (self._process.stdout, self._process.stderr):
            if stream is not None:
                stream.close()


class YtDlpPipeBackend(StreamBackend):
    name = "yt-dlp-pipe"

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._cookie_file = resolve_cookie_file(self._settings)

    def build_command(self, url: str) -> list[str]:
        command = [
            self._settings.ytdlp_binary,
            url,
            "--format", self._settings.ytdlp_format,
            "--no-playlist",
            "--no-warnings",
            "--no-progress",
            "--quiet",
            "--user-agent", USER_AGENT,
            "-o", "-",
        ]
        if self._cookie_file:
            command.extend(["--cookies", self._cookie_file])
        return command

    def _spawn(self, url: str) -> PipeProcess:
        try:
            process = subprocess.Popen(
                self.build_command(url),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise RuntimeError(
                ErrorMessages.PIPE_BINARY_MISSING.format(binary=self._settings.ytdlp_binary)
            ) from e
        logger.debug(LogTemplates.YTDLP_PIPE_STARTED, process.pid, url)
        return PipeProcess(process)

    async def open(self, url: str) -> AudioStream:
        if not is_video_url(url):
            raise ValueError(ErrorMessages.UNSUPPORTED_URL.format(url=url))

        proc = self._spawn(url)
        try:
            has_data = await asyncio.to_thread(proc.peek_first_byte)
        except BaseException:
            # Timeout or cancellation: killing the process unblocks the peek.
            await asyncio.to_thread(proc.kill)
            raise

        if not has_data:
            code, stderr = await asyncio.to_thread(proc.exit_details)
            await asyncio.to_thread(proc.kill)
            raise RuntimeError(ErrorMessages.PIPE_PRODUCED_NO_DATA.format(code=code, stderr=stderr))

        return AudioStream(backend=self.name, pipe=proc.stdout, closer=proc.kill)
