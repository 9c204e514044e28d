"""
Time-bounded memo of Lost Ark API reads.

Entries are keyed by request path and overwritten on every successful fetch.
A non-forced :meth:`ProviderCache.get` inside the TTL returns the stored
payload without touching the network; a forced read always goes to the API.
Failed fetches propagate and leave the previous entry in place.

The key space is bounded by the number of distinct linked characters, so there
is no eviction beyond overwrite.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict
from urllib.parse import quote

from loa_board.board.models import CharacterRecord

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Any]]


@dataclass
class CacheEntry:
    payload: Any
    fetched_at: float


def siblings_path(name: str) -> str:
    """Request path (and cache key) for a character's roster."""

    return f"/characters/{quote(name, safe='')}/siblings"


class ProviderCache:
    """Per-key TTL cache in front of a provider ``fetch(path)`` coroutine."""

    def __init__(
        self,
        fetch: Fetcher,
        ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str, force: bool = False) -> Any:
        now = self._clock()
        entry = self._entries.get(key)
        if not force and entry is not None and now - entry.fetched_at < self._ttl:
            logger.debug("Cache hit for %s (age=%.1fs)", key, now - entry.fetched_at)
            return entry.payload

        payload = await self._fetch(key)
        self._entries[key] = CacheEntry(payload, now)
        return payload

    async def get_siblings(self, name: str, force: bool = False) -> list[CharacterRecord]:
        """Fetch ``name``'s roster through the cache as :class:`CharacterRecord` s."""

        payload = await self.get(siblings_path(name), force=force)
        if not isinstance(payload, list):
            return []
        return [CharacterRecord.from_api(item) for item in payload if isinstance(item, dict)]

    def snapshot(self) -> Dict[str, Any]:
        return {key: entry.payload for key, entry in self._entries.items()}

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ProviderCache", "CacheEntry", "siblings_path"]
