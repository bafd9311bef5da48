"""Unit tests for configuration management."""

import pytest

from rbxprofile.config import AggregatorConfig, CacheBackend, LogFormat


class TestAggregatorConfigDefaults:
    """Test default configuration values."""

    def test_default_timeouts(self):
        config = AggregatorConfig()
        assert config.required_timeout_ms == 10000
        assert config.optional_timeout_ms == 5000

    def test_default_cache_backend(self):
        config = AggregatorConfig()
        assert config.cache_backend == CacheBackend.MEMORY
        assert config.cache_ttl_seconds == 300

    def test_default_queue_settings(self):
        config = AggregatorConfig()
        assert config.batch_size == 3
        assert config.batch_delay_ms == 1200

    def test_default_rate_limit(self):
        config = AggregatorConfig()
        assert config.rate_limit_window_ms == 60000
        assert config.rate_limit_max_requests == 50

    def test_default_log_format(self):
        config = AggregatorConfig()
        assert config.log_format == LogFormat.CONSOLE

    def test_default_placeholder_avatar(self):
        config = AggregatorConfig()
        assert config.avatar_placeholder_url == "https://via.placeholder.com/150"


class TestAggregatorConfigEnvVars:
    """Test configuration from environment variables."""

    def test_cache_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_CACHE_BACKEND", "sqlite")
        config = AggregatorConfig()
        assert config.cache_backend == CacheBackend.SQLITE

    def test_cache_ttl_from_env(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_CACHE_TTL_SECONDS", "600")
        config = AggregatorConfig()
        assert config.cache_ttl_seconds == 600

    def test_batch_delay_from_env(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_BATCH_DELAY_MS", "250")
        config = AggregatorConfig()
        assert config.batch_delay_ms == 250

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_PORT", "8080")
        config = AggregatorConfig()
        assert config.port == 8080

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_LOG_LEVEL", "DEBUG")
        config = AggregatorConfig()
        assert config.log_level == "DEBUG"

    def test_invalid_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("RBXPROFILE_CACHE_BACKEND", "memcached")
        with pytest.raises(ValueError):
            AggregatorConfig()


class TestCacheBackendEnum:
    """Test CacheBackend enum values."""

    def test_cache_backends(self):
        assert CacheBackend.MEMORY.value == "memory"
        assert CacheBackend.SQLITE.value == "sqlite"
        assert CacheBackend.REDIS.value == "redis"
        assert CacheBackend.NONE.value == "none"
