"""Pipeline orchestrator - coordinates caching, queueing, fetching and normalizing."""

import asyncio
import time
from datetime import datetime

import httpx

from rbxprofile.config import AggregatorConfig, CacheBackend
from rbxprofile.cache.base import CacheProvider
from rbxprofile.cache.memory_cache import MemoryCache
from rbxprofile.cache.redis_cache import RedisCache
from rbxprofile.cache.sqlite_cache import SQLiteCache
from rbxprofile.core.aggregator import EnrichmentAggregator
from rbxprofile.core.client import UpstreamClient
from rbxprofile.core.endpoints import USER_DETAILS
from rbxprofile.core.normalizer import normalize_profile
from rbxprofile.core.queue import RequestQueue
from rbxprofile.core.resolver import IdentityResolver, ResolvedUser
from rbxprofile.exceptions import InternalError, RbxProfileError, UpstreamUnavailableError
from rbxprofile.logging import bind_lookup, configure_logging, get_logger
from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.query import ProfileQuery
from rbxprofile.models.result import CacheStats, ErrorInfo, ProfileResult


def build_cache(config: AggregatorConfig) -> CacheProvider | None:
    """Create the cache backend selected in config, None when disabled."""
    if config.cache_backend == CacheBackend.MEMORY:
        return MemoryCache(config.cache_ttl_seconds)
    if config.cache_backend == CacheBackend.SQLITE:
        return SQLiteCache(config.sqlite_path, config.cache_ttl_seconds)
    if config.cache_backend == CacheBackend.REDIS:
        return RedisCache(config.redis_url, config.cache_ttl_seconds)
    return None


class ProfileAggregator:
    """
    High-level interface: one consolidated profile per username.

    Example:
        async with ProfileAggregator() as aggregator:
            profile = await aggregator.fetch_profile("builderman")
            print(profile.followers)
    """

    def __init__(
        self,
        config: AggregatorConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: CacheProvider | None = None,
    ):
        """
        Initialize aggregator with optional configuration.

        Args:
            config: AggregatorConfig instance, uses defaults if None
            transport: httpx transport override for the upstream client
            cache: Cache instance overriding the configured backend
        """
        self.config = config or AggregatorConfig()
        self._transport = transport
        self._cache = cache
        self._client: UpstreamClient | None = None
        self._resolver: IdentityResolver | None = None
        self._enricher: EnrichmentAggregator | None = None
        self._queue: RequestQueue | None = None
        self._sweeper: asyncio.Task | None = None
        self._log = get_logger("aggregator")

    async def __aenter__(self) -> "ProfileAggregator":
        """Async context manager entry - initialize resources."""
        configure_logging(self.config)

        if self._cache is None:
            self._cache = build_cache(self.config)

        self._client = UpstreamClient(self.config, transport=self._transport)
        self._resolver = IdentityResolver(self._client)
        self._enricher = EnrichmentAggregator(self._client, self.config.avatar_placeholder_url)
        self._queue = RequestQueue(self.config.batch_size, self.config.batch_delay_ms)

        if self._cache and self.config.cache_sweep_interval_seconds > 0:
            self._sweeper = asyncio.create_task(self._sweep_cache())

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - cleanup resources."""
        if self._sweeper:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        if self._queue:
            await self._queue.close()
        if self._client:
            await self._client.close()
        if self._cache:
            await self._cache.close()

    @property
    def cache(self) -> CacheProvider | None:
        return self._cache

    @property
    def queue(self) -> RequestQueue | None:
        return self._queue

    async def fetch_profile(
        self,
        username: str,
        force_refresh: bool = False,
    ) -> AggregatedProfile:
        """
        Build (or serve from cache) the consolidated profile for a username.

        Args:
            username: Roblox username
            force_refresh: Skip cache and fetch fresh data

        Returns:
            AggregatedProfile

        Raises:
            InvalidInputError: Blank username
            UserNotFoundError: Username does not exist
            RateLimitedError: Upstream throttled a required call
            UpstreamUnavailableError: A required call failed
            InternalError: Normalization failed unexpectedly
        """
        profile, _ = await self._fetch(ProfileQuery.parse(username), force_refresh)
        return profile

    async def lookup(self, username: str, force_refresh: bool = False) -> ProfileResult:
        """
        Like ``fetch_profile`` but reports errors in the result instead of raising.

        Args:
            username: Roblox username
            force_refresh: Skip cache and fetch fresh data

        Returns:
            ProfileResult with profile or classified error
        """
        start = time.perf_counter()
        try:
            query = ProfileQuery.parse(username)
            profile, cache_age = await self._fetch(query, force_refresh)
        except RbxProfileError as e:
            return ProfileResult(
                success=False,
                username=(username or "").strip(),
                error=ErrorInfo.model_validate(e.to_dict()),
                duration_ms=(time.perf_counter() - start) * 1000,
            )

        return ProfileResult(
            success=True,
            username=profile.username,
            profile=profile,
            cached=cache_age is not None,
            cache_age_seconds=cache_age,
            duration_ms=(time.perf_counter() - start) * 1000,
        )

    async def lookup_many(
        self,
        usernames: list[str],
        force_refresh: bool = False,
    ) -> list[ProfileResult]:
        """
        Look up several usernames; the request queue paces the upstream work.

        Args:
            usernames: List of Roblox usernames
            force_refresh: Skip cache for all

        Returns:
            List of ProfileResults in same order as input
        """
        return list(await asyncio.gather(
            *(self.lookup(username, force_refresh) for username in usernames)
        ))

    async def _fetch(
        self,
        query: ProfileQuery,
        force_refresh: bool,
    ) -> tuple[AggregatedProfile, float | None]:
        if self._queue is None:
            raise RuntimeError("ProfileAggregator must be used as an async context manager")

        self._log.info("lookup_start", username=query.username, force_refresh=force_refresh)

        if self._cache and not force_refresh:
            entry = await self._cache.get_entry(query.key)
            if entry:
                profile, age = entry
                self._log.info("cache_hit", key=query.key, age_seconds=age)
                return profile, age

        profile = await self._queue.submit(lambda: self._aggregate(query))

        if self._cache:
            await self._cache.set(query.key, profile)

        return profile, None

    async def _aggregate(self, query: ProfileQuery) -> AggregatedProfile:
        start = datetime.now()

        with bind_lookup(username=query.username):
            resolved = await self._resolver.resolve(query.username)
            with bind_lookup(user_id=resolved.user_id):
                profile, failed_calls = await self._build(resolved)
                self._log.info(
                    "lookup_complete",
                    degraded_fields=failed_calls,
                    duration_ms=(datetime.now() - start).total_seconds() * 1000,
                )
        return profile

    async def _build(self, resolved: ResolvedUser) -> tuple[AggregatedProfile, list[str]]:
        details_result, enrichment = await asyncio.gather(
            self._client.call(USER_DETAILS, user_id=resolved.user_id),
            self._enricher.collect(resolved.user_id),
        )
        details = details_result.raise_for_failure()
        if not isinstance(details, dict):
            raise UpstreamUnavailableError("Unexpected response from user details", details=details)

        try:
            profile = normalize_profile(resolved, details, enrichment)
        except Exception as e:
            self._log.exception("normalize_failed")
            raise InternalError() from e
        return profile, enrichment.failed_calls

    async def _sweep_cache(self) -> None:
        interval = self.config.cache_sweep_interval_seconds
        while True:
            await asyncio.sleep(interval)
            try:
                removed = await self._cache.cleanup_expired()
            except Exception as e:
                # Keep sweeping; reads still honour expiry without it.
                self._log.warning("cache_sweep_failed", error=repr(e))
                continue
            if removed:
                self._log.debug("cache_swept", removed=removed)

    async def cache_stats(self) -> CacheStats:
        """Entry count and hit/miss counters of the active cache."""
        if not self._cache:
            return CacheStats(backend=CacheBackend.NONE.value, entries=0)
        return await self._cache.stats()

    async def cache_keys(self) -> list[str]:
        """Snapshot of stored cache keys."""
        if not self._cache:
            return []
        return await self._cache.keys()

    async def invalidate_cache(self, username: str) -> bool:
        """Remove a specific username from cache."""
        if not self._cache:
            return False
        return await self._cache.delete(ProfileQuery.parse(username).key)

    async def clear_cache(self) -> int:
        """Clear all cached data, returning the number of entries removed."""
        if not self._cache:
            return 0
        return await self._cache.clear()
