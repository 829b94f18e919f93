"""Shared validators for Discord-specific data types."""

from __future__ import annotations

from .messages import ErrorMessages


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers representing unique
    identifiers for users, guilds, channels, messages, etc.

    Raises:
        ValueError: If the snowflake ID is invalid.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


def clamp_unit(value: float) -> float:
    """Clamp a float into the closed interval [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))
