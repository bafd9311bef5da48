"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic_settings import BaseSettings


class CacheBackend(str, Enum):
    """Cache backend type."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    REDIS = "redis"
    NONE = "none"


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


class AggregatorConfig(BaseSettings):
    """Configuration for the rbxprofile aggregator and API server."""

    # Upstream settings
    user_agent: str = "Roblox-Account-Checker/1.0"
    required_timeout_ms: int = 10000
    optional_timeout_ms: int = 5000
    avatar_placeholder_url: str = "https://via.placeholder.com/150"
    retry_after_seconds: int = 30

    # Request queue
    batch_size: int = 3
    batch_delay_ms: int = 1200

    # Cache settings
    cache_backend: CacheBackend = CacheBackend.MEMORY
    cache_ttl_seconds: int = 300
    cache_sweep_interval_seconds: int = 60
    sqlite_path: str = ".rbxprofile_cache.db"
    redis_url: str = "redis://localhost:6379/0"

    # API server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    rate_limit_window_ms: int = 60000
    rate_limit_max_requests: int = 50

    # Logging
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE

    model_config = {
        "env_prefix": "RBXPROFILE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }
