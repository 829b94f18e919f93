"""Jukebox settings loaded from the environment and an optional .env file.

Nested groups use the ``__`` delimiter, e.g. ``AUDIO__MAX_QUEUE_SIZE=200``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.validators import validate_discord_snowflake


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = False

    @field_validator("guild_ids", "test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        # JSON arrays in env vars arrive as lists
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            validate_discord_snowflake(snowflake)
        return v


class AudioSettings(BaseModel):
    """Audio playback and stream extraction configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume_percent: int = Field(
        default=50,
        ge=0,
        le=100,
        validation_alias=AliasChoices("default_volume_percent", "default_volume", "volume"),
    )
    max_queue_size: int = Field(default=100, ge=1, le=1000)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio[ext=m4a]/bestaudio/best"
    ytdlp_binary: str = Field(default="yt-dlp", min_length=1)
    cookies_path: str | None = Field(
        default=None, validation_alias=AliasChoices("cookies_path", "cookies_file", "cookies")
    )
    pot_server_url: str = Field(
        default="http://127.0.0.1:4416",
        validation_alias=AliasChoices("pot_server_url", "bgutil_pot_server_url"),
    )

    @property
    def default_volume(self) -> float:
        return self.default_volume_percent / 100

    @property
    def cookie_file(self) -> Path | None:
        if not self.cookies_path:
            return None
        return Path(self.cookies_path).expanduser()


class ResolverSettings(BaseModel):
    """Timeouts and cache bounds for search, suggestions and stream extraction."""

    model_config = SettingsConfigDict(frozen=True)

    metadata_timeout_seconds: float = Field(default=5.0, gt=0.0, le=600.0)
    search_timeout_seconds: float | None = Field(default=None, gt=0.0, le=600.0)
    suggestion_timeout_seconds: float = Field(default=2.5, gt=0.0, le=600.0)
    extraction_timeout_seconds: float = Field(default=20.0, gt=0.0, le=600.0)
    first_play_timeout_seconds: float = Field(default=15.0, gt=0.0, le=600.0)
    suggestion_cache_ttl_seconds: int = Field(default=300, ge=0)
    suggestion_cache_max_size: int = Field(default=500, ge=1)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, etc. (nested, ``__`` delimiter)
    - AUDIO__MAX_QUEUE_SIZE, AUDIO__COOKIES_PATH, ...
    - RESOLVER__EXTRACTION_TIMEOUT_SECONDS, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
