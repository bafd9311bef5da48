"""rbxprofile - consolidated Roblox profile lookups."""

__version__ = "0.1.0"

from rbxprofile.models.profile import AggregatedProfile
from rbxprofile.models.result import CacheStats, ErrorInfo, ProfileResult
from rbxprofile.config import AggregatorConfig
from rbxprofile.core.orchestrator import ProfileAggregator
from rbxprofile.core.exporter import to_json, to_dict, save_json, load_json
from rbxprofile.exceptions import (
    RbxProfileError,
    InvalidInputError,
    UserNotFoundError,
    UpstreamUnavailableError,
    RateLimitedError,
    InternalError,
)

__all__ = [
    # Main interface
    "ProfileAggregator",
    "AggregatorConfig",
    # Models
    "AggregatedProfile",
    "ProfileResult",
    "ErrorInfo",
    "CacheStats",
    # Errors
    "RbxProfileError",
    "InvalidInputError",
    "UserNotFoundError",
    "UpstreamUnavailableError",
    "RateLimitedError",
    "InternalError",
    # Export utilities
    "to_json",
    "to_dict",
    "save_json",
    "load_json",
    "__version__",
]
