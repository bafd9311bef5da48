"""SQLite-based cache implementation."""

import time
from pathlib import Path

import aiosqlite

from rbxprofile.cache.base import CacheProvider
from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats


class SQLiteCache(CacheProvider):
    """SQLite-based local cache using aiosqlite."""

    backend_name = "sqlite"

    def __init__(self, db_path: str = ".rbxprofile_cache.db", default_ttl: int = 300):
        """
        Initialize SQLite cache.

        Args:
            db_path: Path to SQLite database file
            default_ttl: Default TTL in seconds (5 minutes)
        """
        self.db_path = Path(db_path)
        self.default_ttl = default_ttl
        self._db: aiosqlite.Connection | None = None
        self._hits = 0
        self._misses = 0

    async def _ensure_db(self) -> aiosqlite.Connection:
        """Ensure database connection and schema exist."""
        if self._db is None:
            self._db = await aiosqlite.connect(self.db_path)
            await self._db.execute("""
                CREATE TABLE IF NOT EXISTS profile_cache (
                    cache_key TEXT PRIMARY KEY,
                    profile_json TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    expires_at REAL NOT NULL
                )
            """)
            await self._db.execute(
                "CREATE INDEX IF NOT EXISTS idx_expires ON profile_cache(expires_at)"
            )
            await self._db.commit()
        return self._db

    async def get_entry(self, key: str) -> tuple[AggregatedProfile, float] | None:
        """Retrieve cached profile and age, None if miss or expired."""
        db = await self._ensure_db()
        now = time.time()

        async with db.execute(
            "SELECT profile_json, created_at, expires_at FROM profile_cache WHERE cache_key = ?",
            (key,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            self._misses += 1
            return None

        profile_json, created_at, expires_at = row
        if now > expires_at:
            await self.delete(key)
            self._misses += 1
            return None

        self._hits += 1
        return AggregatedProfile.model_validate_json(profile_json), now - created_at

    async def set(
        self, key: str, profile: AggregatedProfile, ttl_seconds: int | None = None
    ) -> None:
        """Store profile in cache."""
        db = await self._ensure_db()
        now = time.time()
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl

        await db.execute(
            """
            INSERT OR REPLACE INTO profile_cache (cache_key, profile_json, created_at, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            (key, profile.model_dump_json(), now, now + ttl),
        )
        await db.commit()

    async def delete(self, key: str) -> bool:
        """Remove specific entry."""
        db = await self._ensure_db()
        cursor = await db.execute("DELETE FROM profile_cache WHERE cache_key = ?", (key,))
        await db.commit()
        return cursor.rowcount > 0

    async def clear(self) -> int:
        """Clear all cached entries."""
        db = await self._ensure_db()
        cursor = await db.execute("DELETE FROM profile_cache")
        await db.commit()
        return cursor.rowcount

    async def keys(self) -> list[str]:
        db = await self._ensure_db()
        async with db.execute("SELECT cache_key FROM profile_cache ORDER BY created_at") as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def stats(self) -> CacheStats:
        db = await self._ensure_db()
        async with db.execute("SELECT COUNT(*) FROM profile_cache") as cursor:
            (count,) = await cursor.fetchone()
        return CacheStats(
            backend=self.backend_name,
            entries=count,
            hits=self._hits,
            misses=self._misses,
        )

    async def cleanup_expired(self) -> int:
        """
        Remove expired entries from cache.

        Returns:
            Number of entries removed
        """
        db = await self._ensure_db()
        now = time.time()
        cursor = await db.execute(
            "DELETE FROM profile_cache WHERE expires_at < ?", (now,)
        )
        await db.commit()
        return cursor.rowcount

    async def close(self) -> None:
        """Close database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
