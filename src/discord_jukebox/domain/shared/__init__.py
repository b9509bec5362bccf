"""
Shared Domain Kernel

Contains exceptions, events, and message constants shared across the package.
"""

from discord_jukebox.domain.shared.events import EventBus
from discord_jukebox.domain.shared.exceptions import (
    AcquisitionError,
    AlreadyConnectedError,
    DomainError,
    NotConnectedError,
    NotInVoiceChannelError,
    ResolutionError,
    SessionError,
    VoiceConnectionError,
)

__all__ = [
    "EventBus",
    "DomainError",
    "ResolutionError",
    "AcquisitionError",
    "SessionError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "NotInVoiceChannelError",
    "VoiceConnectionError",
]
