"""Inbound lookup key."""

from dataclasses import dataclass

from rbxprofile.exceptions import InvalidInputError

CACHE_KEY_PREFIX = "user:"


@dataclass(frozen=True)
class ProfileQuery:
    """A validated username and its case-normalized cache key."""

    username: str

    @property
    def key(self) -> str:
        return cache_key(self.username)

    @classmethod
    def parse(cls, raw: str | None) -> "ProfileQuery":
        """
        Validate a raw username from the caller.

        Raises:
            InvalidInputError: If the username is missing or blank
        """
        username = (raw or "").strip().lstrip("@").strip()
        if not username:
            raise InvalidInputError(
                "Username is required",
                details="Please provide a valid Roblox username",
            )
        return cls(username)


def cache_key(username: str) -> str:
    """Cache key for a username, case-insensitive."""
    return f"{CACHE_KEY_PREFIX}{username.strip().lstrip('@').lower()}"
