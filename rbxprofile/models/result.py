"""Lookup result wrapper models."""

from typing import Any

from pydantic import BaseModel

from rbxprofile.models.profile import AggregatedProfile


class ErrorInfo(BaseModel):
    """Classified error returned to API and CLI callers."""

    error: str
    message: str
    details: Any = None
    retry_after_seconds: int | None = None


class ProfileResult(BaseModel):
    """Wrapper for a single lookup, successful or not."""

    success: bool
    username: str
    profile: AggregatedProfile | None = None
    cached: bool = False
    cache_age_seconds: float | None = None
    error: ErrorInfo | None = None
    duration_ms: float = 0.0


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    backend: str
    entries: int
    hits: int = 0
    misses: int = 0
