"""Redis cache implementation."""

import time
from typing import Optional

from rbxprofile.cache.base import CacheProvider
from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats

try:
    import redis.asyncio as redis
    from redis.exceptions import RedisError
    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False


class RedisCache(CacheProvider):
    """
    Redis-based cache provider.

    Requires redis package: pip install rbxprofile[redis]

    Example:
        cache = RedisCache("redis://localhost:6379/0")
        async with cache:
            await cache.set("user:builderman", profile)
            cached = await cache.get("user:builderman")
    """

    backend_name = "redis"

    def __init__(self, redis_url: str = "redis://localhost:6379/0", default_ttl: int = 300):
        """
        Initialize Redis cache.

        Args:
            redis_url: Redis connection URL
            default_ttl: Default TTL in seconds
        """
        if not REDIS_AVAILABLE:
            raise ImportError(
                "Redis package not installed. Install with: pip install rbxprofile[redis]"
            )

        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self._client: Optional[redis.Redis] = None
        self._key_prefix = "rbxprofile:"
        self._hits = 0
        self._misses = 0

    async def _ensure_client(self) -> "redis.Redis":
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(self.redis_url)
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def _scan_keys(self) -> list[bytes]:
        client = await self._ensure_client()
        found = []
        cursor = 0
        while True:
            cursor, batch = await client.scan(cursor, match=f"{self._key_prefix}*")
            found.extend(k for k in batch if not _as_str(k).endswith(":ts"))
            if cursor == 0:
                break
        return found

    async def get_entry(self, key: str) -> tuple[AggregatedProfile, float] | None:
        """Retrieve cached profile for key. Redis expires entries itself."""
        client = await self._ensure_client()
        redis_key = self._make_key(key)

        pipe = client.pipeline()
        pipe.get(redis_key)
        pipe.get(f"{redis_key}:ts")
        data, timestamp = await pipe.execute()

        if data is None:
            self._misses += 1
            return None

        try:
            profile = AggregatedProfile.model_validate_json(data)
        except ValueError:
            # Unreadable entry, drop it
            await self.delete(key)
            self._misses += 1
            return None

        self._hits += 1
        age = time.time() - float(timestamp) if timestamp else 0.0
        return profile, age

    async def set(
        self,
        key: str,
        profile: AggregatedProfile,
        ttl_seconds: int | None = None,
    ) -> None:
        """Cache profile for key."""
        client = await self._ensure_client()
        redis_key = self._make_key(key)
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl

        pipe = client.pipeline()
        pipe.setex(redis_key, ttl, profile.model_dump_json())
        pipe.setex(f"{redis_key}:ts", ttl, str(time.time()))
        await pipe.execute()

    async def delete(self, key: str) -> bool:
        """Remove cached profile for key."""
        client = await self._ensure_client()
        redis_key = self._make_key(key)
        removed = await client.delete(redis_key, f"{redis_key}:ts")
        return removed > 0

    async def clear(self) -> int:
        """Clear all rbxprofile data."""
        client = await self._ensure_client()
        keys = await self._scan_keys()
        for key in keys:
            await client.delete(key, f"{_as_str(key)}:ts")
        return len(keys)

    async def keys(self) -> list[str]:
        prefix_len = len(self._key_prefix)
        return [_as_str(k)[prefix_len:] for k in await self._scan_keys()]

    async def stats(self) -> CacheStats:
        return CacheStats(
            backend=self.backend_name,
            entries=len(await self._scan_keys()),
            hits=self._hits,
            misses=self._misses,
        )

    async def cleanup_expired(self) -> int:
        """Redis evicts expired keys on its own."""
        return 0

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        """Check if Redis is available."""
        try:
            client = await self._ensure_client()
            return await client.ping()
        except (OSError, RedisError):
            return False


def _as_str(key: bytes | str) -> str:
    return key.decode() if isinstance(key, bytes) else key
