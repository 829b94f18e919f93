"""
Application Commands

Command objects and their handlers for write operations.
Commands represent intent to change a guild's playback.
"""

from discord_jukebox.application.commands.control_playback import (
    ControlAction,
    ControlPlaybackCommand,
    ControlResult,
    SetVolumeCommand,
)
from discord_jukebox.application.commands.play_track import (
    PlayTrackCommand,
    PlayTrackResult,
    PlayTrackStatus,
)
from discord_jukebox.application.commands.skip_track import SkipResult, SkipTrackCommand
from discord_jukebox.application.commands.stop_playback import StopPlaybackCommand, StopResult

__all__ = [
    # Play
    "PlayTrackCommand",
    "PlayTrackResult",
    "PlayTrackStatus",
    # Skip
    "SkipTrackCommand",
    "SkipResult",
    # Stop
    "StopPlaybackCommand",
    "StopResult",
    # Pause / resume / volume
    "ControlAction",
    "ControlPlaybackCommand",
    "SetVolumeCommand",
    "ControlResult",
]
