"""Autocomplete suggestions for the play command, with a small TTL cache."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.domain.shared.types import ChoiceStr, NonNegativeFloat
from discord_jukebox.utils.reply import truncate

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from .search_resolver import SearchResolver

logger = logging.getLogger(__name__)

MIN_PREFIX_LENGTH: Final[int] = 2
CHOICE_MAX_LENGTH: Final[int] = 100


class Suggestion(BaseModel):
    """One autocomplete choice; both fields fit Discord's 100 character limit."""

    model_config = ConfigDict(frozen=True)

    name: ChoiceStr
    value: ChoiceStr

    @classmethod
    def from_track(cls, track: Track) -> Suggestion:
        label = f"{track.title} ({track.duration_formatted})"
        return cls(
            name=truncate(label, CHOICE_MAX_LENGTH),
            value=truncate(track.source_url, CHOICE_MAX_LENGTH),
        )


class CacheEntry(BaseModel):
    suggestions: tuple[Suggestion, ...]
    cached_at: NonNegativeFloat = Field(default_factory=time.time)

    def is_expired(self, ttl_seconds: float) -> bool:
        return (time.time() - self.cached_at) > ttl_seconds


class SuggestionService:
    """Bounded-time search for autocomplete.

    Never raises: a slow or failing search yields an empty list, because an
    autocomplete callback that errors is shown to the user as a broken
    command.
    """

    def __init__(
        self,
        *,
        resolver: SearchResolver,
        timeout: float = 2.5,
        limit: int = 5,
        ttl_seconds: float = 300.0,
        max_size: int = 500,
    ) -> None:
        self._resolver = resolver
        self._timeout = timeout
        self._limit = limit
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._cache: dict[str, CacheEntry] = {}
        self._cache_hits = 0
        self._cache_misses = 0

    async def suggest(self, prefix: str) -> list[Suggestion]:
        prefix = prefix.strip()
        if len(prefix) < MIN_PREFIX_LENGTH:
            return []

        key = prefix.lower()
        cached = self._cache.get(key)
        if cached is not None and not cached.is_expired(self._ttl):
            self._cache_hits += 1
            logger.debug(LogTemplates.CACHE_HIT, key)
            return list(cached.suggestions)
        self._cache_misses += 1

        # Each backend call gets its own timeout budget.
        try:
            tracks = await self._resolver.search(
                prefix, limit=self._limit, timeout=self._timeout
            )
        except Exception as e:
            logger.warning(LogTemplates.SUGGESTION_FAILED, prefix, e)
            return []

        suggestions = [Suggestion.from_track(track) for track in tracks[: self._limit]]
        if suggestions:
            self._store(key, suggestions)
        return suggestions

    def clear_cache(self) -> int:
        count = len(self._cache)
        self._cache.clear()
        self._cache_hits = 0
        self._cache_misses = 0
        return count

    def get_cache_stats(self) -> dict[str, int]:
        return {
            "size": len(self._cache),
            "hits": self._cache_hits,
            "misses": self._cache_misses,
        }

    def _store(self, key: str, suggestions: list[Suggestion]) -> None:
        self._cache[key] = CacheEntry(suggestions=tuple(suggestions))
        if len(self._cache) > self._max_size:
            self._prune()

    def _prune(self) -> None:
        now = time.time()
        expired = [k for k, v in self._cache.items() if now - v.cached_at >= self._ttl]
        for k in expired:
            del self._cache[k]

        # Still over budget: drop the oldest entries.
        overflow = len(self._cache) - self._max_size
        if overflow > 0:
            oldest = sorted(self._cache, key=lambda k: self._cache[k].cached_at)[:overflow]
            for k in oldest:
                del self._cache[k]
            expired.extend(oldest)

        if expired:
            logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(expired))
