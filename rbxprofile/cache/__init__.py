"""Cache implementations."""

from rbxprofile.cache.base import CacheProvider
from rbxprofile.cache.memory_cache import MemoryCache
from rbxprofile.cache.sqlite_cache import SQLiteCache
from rbxprofile.cache.redis_cache import RedisCache

__all__ = ["CacheProvider", "MemoryCache", "SQLiteCache", "RedisCache"]
