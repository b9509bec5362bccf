"""Port interface for resolving user input into track records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import TrackRecord
    from ...domain.music.value_objects import PlayInput


class MetadataResolver(ABC):
    """Interface for turning a URL or search query into canonical track records."""

    @abstractmethod
    async def resolve(self, play_input: PlayInput) -> list[TrackRecord]:
        """Resolve input into zero or more tracks.

        An empty list is a successful resolution. Failures to reach the
        metadata API or to start the extractor raise ``ResolutionError``.
        """
        ...
