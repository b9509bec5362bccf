"""Application ports implemented by the infrastructure layer."""

from discord_jukebox.application.interfaces.metadata_resolver import MetadataResolver
from discord_jukebox.application.interfaces.stream_acquirer import AudioStream, StreamAcquirer
from discord_jukebox.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter

__all__ = [
    "MetadataResolver",
    "AudioStream",
    "StreamAcquirer",
    "VoiceAdapter",
    "TrackEndCallback",
]
