"""Abstract cache interface."""

from abc import ABC, abstractmethod

from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats


class CacheProvider(ABC):
    """Abstract base class for cache implementations.

    Keys are opaque strings (see ``rbxprofile.models.query.cache_key``).
    An entry is treated as absent once its expiry has passed, whether or not
    it has been physically removed yet.
    """

    backend_name: str = "unknown"

    @abstractmethod
    async def get_entry(self, key: str) -> tuple[AggregatedProfile, float] | None:
        """
        Retrieve a cached profile together with its age.

        Args:
            key: Cache key

        Returns:
            (profile, age_seconds) or None if miss/expired
        """
        ...

    async def get(self, key: str) -> AggregatedProfile | None:
        """
        Retrieve a cached profile.

        Args:
            key: Cache key

        Returns:
            Cached AggregatedProfile or None if miss/expired
        """
        entry = await self.get_entry(key)
        return entry[0] if entry else None

    @abstractmethod
    async def set(self, key: str, profile: AggregatedProfile, ttl_seconds: int | None = None) -> None:
        """
        Store a profile, replacing any existing entry for the key.

        Args:
            key: Cache key
            profile: AggregatedProfile to cache
            ttl_seconds: Optional TTL override
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a specific entry.

        Returns:
            True if an entry existed
        """
        ...

    @abstractmethod
    async def clear(self) -> int:
        """
        Clear all cached entries.

        Returns:
            Number of entries removed
        """
        ...

    @abstractmethod
    async def keys(self) -> list[str]:
        """Snapshot of stored keys, possibly including expired ones."""
        ...

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Entry count and hit/miss counters."""
        ...

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """
        Remove expired entries.

        Returns:
            Number of entries removed
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Cleanup connections and resources."""
        ...

    async def __aenter__(self) -> "CacheProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - cleanup."""
        await self.close()
