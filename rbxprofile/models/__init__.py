"""Pydantic models for rbxprofile."""

from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats, ErrorInfo, ProfileResult
from rbxprofile.models.query import ProfileQuery, cache_key

__all__ = [
    "AggregatedProfile",
    "CacheStats",
    "ErrorInfo",
    "ProfileResult",
    "ProfileQuery",
    "cache_key",
]
