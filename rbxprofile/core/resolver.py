"""Username to user id resolution."""

from dataclasses import dataclass

from rbxprofile.core.client import UpstreamClient
from rbxprofile.core.endpoints import LOOKUP_USERNAME
from rbxprofile.exceptions import (
    InvalidInputError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from rbxprofile.logging import get_logger


@dataclass(frozen=True)
class ResolvedUser:
    """Basic identity returned by the username lookup."""

    user_id: int
    username: str
    display_name: str | None = None


class IdentityResolver:
    """Resolves a username into a Roblox user id with one lookup call."""

    def __init__(self, client: UpstreamClient):
        self.client = client
        self._log = get_logger("resolver")

    async def resolve(self, username: str) -> ResolvedUser:
        """
        Look up a username.

        Args:
            username: Roblox username, surrounding whitespace ignored

        Returns:
            ResolvedUser for the first match

        Raises:
            InvalidInputError: If the username is blank
            UserNotFoundError: If the lookup returns no matches
            RateLimitedError: If the lookup timed out or was throttled
            UpstreamUnavailableError: If the lookup failed otherwise
        """
        username = (username or "").strip()
        if not username:
            raise InvalidInputError(
                "Username is required",
                details="Please provide a valid Roblox username",
            )

        result = await self.client.call(
            LOOKUP_USERNAME,
            body={"usernames": [username], "excludeBannedUsers": False},
        )
        payload = result.raise_for_failure()

        users = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(users, list):
            raise UpstreamUnavailableError(
                "Unexpected response from username lookup",
                details=payload,
            )
        if not users:
            self._log.info("user_not_found", username=username)
            raise UserNotFoundError(
                "User not found",
                details="The specified Roblox username does not exist",
            )

        match = users[0]
        user_id = match.get("id") if isinstance(match, dict) else None
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise UpstreamUnavailableError(
                "Username lookup returned a match without an id",
                details=match,
            )

        resolved = ResolvedUser(
            user_id=user_id,
            username=match.get("name") or username,
            display_name=match.get("displayName") or None,
        )
        self._log.debug("user_resolved", username=resolved.username, user_id=resolved.user_id)
        return resolved
