"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_jukebox.application.interfaces.audio_resolver import MetadataBackend, SearchBackend
from discord_jukebox.application.interfaces.stream_backend import AudioStream, StreamBackend
from discord_jukebox.application.interfaces.voice_adapter import AudioSink, VoiceConnector

__all__ = [
    "MetadataBackend",
    "SearchBackend",
    "AudioStream",
    "StreamBackend",
    "AudioSink",
    "VoiceConnector",
]
