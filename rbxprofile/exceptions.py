"""Custom exception hierarchy for rbxprofile."""

from typing import Any


class RbxProfileError(Exception):
    """Base exception for all rbxprofile errors."""

    kind = "Internal"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable error envelope for the HTTP layer."""
        return {
            "error": self.kind,
            "message": self.message,
            "details": self.details,
            "retry_after_seconds": None,
        }


class InvalidInputError(RbxProfileError):
    """Username missing or blank."""

    kind = "InvalidInput"
    status_code = 400
    default_message = "Username is required"


class UserNotFoundError(RbxProfileError):
    """Identity lookup returned zero matches."""

    kind = "UserNotFound"
    status_code = 404
    default_message = "User not found"


class UpstreamUnavailableError(RbxProfileError):
    """A required upstream call failed or returned an unexpected shape."""

    kind = "UpstreamUnavailable"
    default_message = "Upstream service unavailable"

    def __init__(
        self,
        message: str | None = None,
        details: Any = None,
        upstream_status: int | None = None,
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status
        # Surface upstream error statuses as-is, anything else as a bad gateway.
        if upstream_status is not None and 400 <= upstream_status < 600:
            self.status_code = upstream_status
        else:
            self.status_code = 502


class RateLimitedError(RbxProfileError):
    """Upstream throttled us, or the local limiter refused the request."""

    kind = "RateLimited"
    status_code = 429
    default_message = "Rate limit exceeded, please try again in a few moments"

    def __init__(
        self,
        message: str | None = None,
        details: Any = None,
        retry_after_seconds: int = 30,
    ):
        super().__init__(message, details)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class InternalError(RbxProfileError):
    """Unexpected failure while building a profile."""

    default_message = "Something went wrong on our end"


class CacheError(RbxProfileError):
    """Cache operation failed."""


class ConfigError(RbxProfileError):
    """Invalid configuration."""
