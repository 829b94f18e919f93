#!/usr/bin/env python3
"""Main entry point for discord-jukebox.

Loads settings, configures logging, checks the external binaries playback
depends on, then builds the container and runs the bot until a signal stops it.
"""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_jukebox.config.settings import AudioSettings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

FFMPEG_BINARY = "ffmpeg"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    """Apply ``logging_config.json``; the settings' level always wins on the root logger."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger(__name__).warning(LogTemplates.BOT_LOGGING_CONFIG_FALLBACK, config_path)

    logging.getLogger().setLevel(resolved_level)


def check_binaries(audio: AudioSettings) -> bool:
    """Log where ffmpeg and the yt-dlp executable live.

    Returns False when ffmpeg is missing, since no track could ever be
    played. A missing yt-dlp executable only disables the pipe fallback.
    """
    ffmpeg_path = shutil.which(FFMPEG_BINARY)
    if ffmpeg_path is None:
        logger.error(ErrorMessages.FFMPEG_REQUIRED)
        return False
    logger.info(LogTemplates.BOT_BINARY_FOUND, FFMPEG_BINARY, ffmpeg_path)

    ytdlp_path = shutil.which(audio.ytdlp_binary)
    if ytdlp_path is None:
        logger.warning(LogTemplates.BOT_PIPE_BINARY_MISSING, audio.ytdlp_binary)
    else:
        logger.info(LogTemplates.BOT_BINARY_FOUND, audio.ytdlp_binary, ytdlp_path)
    return True


def main() -> int:
    from discord_jukebox.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    if not check_binaries(settings.audio):
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))

    from discord_jukebox.config.container import create_container
    from discord_jukebox.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)
    logger.info(
        LogTemplates.BOT_BACKENDS, ", ".join(backend.name for backend in container.stream_backends)
    )

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token_value)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1
    else:
        logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
