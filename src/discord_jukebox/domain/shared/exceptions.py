"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ResolutionError(DomainError):
    """Raised when user input cannot be turned into track records.

    Covers an unspawnable extractor and an unreachable metadata API. The
    queue is left unchanged when this is raised.
    """

    def __init__(self, query: str, message: str | None = None) -> None:
        msg = message or f"Could not resolve '{query}'"
        super().__init__(msg, code="RESOLUTION_ERROR")
        self.query = query


class AcquisitionError(DomainError):
    """Raised when a decoded audio stream cannot be produced for a track."""

    def __init__(self, track_title: str, message: str | None = None) -> None:
        msg = message or f"Could not acquire a stream for '{track_title}'"
        super().__init__(msg, code="ACQUISITION_ERROR")
        self.track_title = track_title


class SessionError(DomainError):
    """Raised when a command is rejected because of the voice session state."""

    def __init__(self, guild_id: int, message: str, code: str = "SESSION_ERROR") -> None:
        super().__init__(message, code=code)
        self.guild_id = guild_id


class NotConnectedError(SessionError):
    def __init__(self, guild_id: int, message: str | None = None) -> None:
        super().__init__(guild_id, message or "Not in a voice channel", code="NOT_CONNECTED")


class AlreadyConnectedError(SessionError):
    def __init__(self, guild_id: int, message: str | None = None) -> None:
        super().__init__(guild_id, message or "Already joined", code="ALREADY_CONNECTED")


class NotInVoiceChannelError(SessionError):
    def __init__(self, guild_id: int, message: str | None = None) -> None:
        super().__init__(guild_id, message or "No channel found", code="NOT_IN_VOICE_CHANNEL")


class VoiceConnectionError(SessionError):
    def __init__(self, guild_id: int, channel_id: int, message: str | None = None) -> None:
        msg = message or f"Cannot join voice channel {channel_id}"
        super().__init__(guild_id, msg, code="VOICE_CONNECTION_ERROR")
        self.channel_id = channel_id
