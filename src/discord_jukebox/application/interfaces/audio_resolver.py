"""Port interfaces for the metadata and search backends used by the resolver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class MetadataBackend(ABC):
    """Looks up track metadata for a direct video URL without streaming it."""

    name: str

    @abstractmethod
    async def fetch_metadata(self, url: HttpUrlStr) -> Track | None:
        """Return the track behind ``url``, or None when the backend knows nothing."""
        ...


class SearchBackend(ABC):
    """Free-text search returning tracks ranked best-first."""

    name: str

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 1) -> list[Track]:
        """Search for up to ``limit`` tracks matching ``query``."""
        ...
