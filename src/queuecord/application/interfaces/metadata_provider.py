"""Port interface for fetching track and playlist metadata."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from queuecord.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from queuecord.domain.music.entities import PlaylistRecord, TrackRecord


class MetadataProvider(ABC):
    """Interface for resolving locators to track metadata.

    Implementations raise :class:`~queuecord.domain.shared.exceptions.ProviderError`
    on any failure instead of returning None.
    """

    @abstractmethod
    async def fetch_metadata(self, locator: NonEmptyStr) -> "TrackRecord":
        """Fetch one track for a URL, or the first match for a search term."""
        ...

    @abstractmethod
    async def fetch_playlist(self, url: NonEmptyStr) -> "PlaylistRecord":
        """Fetch playlist-level metadata and its member stubs in order."""
        ...
