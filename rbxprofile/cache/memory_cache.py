"""In-process cache implementation."""

import time
from dataclasses import dataclass
from typing import Callable

from rbxprofile.cache.base import CacheProvider
from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats


@dataclass
class CacheEntry:
    """A stored profile and its lifetime bounds."""

    profile: AggregatedProfile
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class MemoryCache(CacheProvider):
    """
    Dict-backed cache living in the current process.

    Every read checks expiry, so sweeping with ``cleanup_expired`` only
    bounds memory. Not thread-safe; meant for a single event loop.

    Example:
        cache = MemoryCache(default_ttl=300)
        await cache.set("user:builderman", profile)
        cached = await cache.get("user:builderman")
    """

    backend_name = "memory"

    def __init__(self, default_ttl: int = 300, clock: Callable[[], float] = time.time):
        """
        Initialize memory cache.

        Args:
            default_ttl: Default TTL in seconds
            clock: Time source in seconds, injectable for tests
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    async def get_entry(self, key: str) -> tuple[AggregatedProfile, float] | None:
        entry = self._entries.get(key)
        now = self._clock()

        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(now):
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        return entry.profile, now - entry.created_at

    async def set(self, key: str, profile: AggregatedProfile, ttl_seconds: int | None = None) -> None:
        now = self._clock()
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl
        self._entries[key] = CacheEntry(profile=profile, created_at=now, expires_at=now + ttl)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    async def keys(self) -> list[str]:
        return list(self._entries)

    async def stats(self) -> CacheStats:
        return CacheStats(
            backend=self.backend_name,
            entries=len(self._entries),
            hits=self._hits,
            misses=self._misses,
        )

    async def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def close(self) -> None:
        self._entries.clear()
