"""Roblox public API endpoints used by the aggregator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TimeoutClass(str, Enum):
    """Which timeout budget a call runs under."""
    LONG = "long"
    SHORT = "short"


@dataclass(frozen=True)
class Endpoint:
    """A single upstream endpoint, parameterized by user id."""

    name: str
    method: str
    url: str
    body: dict[str, Any] | None = field(default=None, hash=False, compare=False)
    timeout: TimeoutClass = TimeoutClass.SHORT

    def render(self, user_id: int | None = None) -> tuple[str, dict[str, Any] | None]:
        """Fill the ``{user_id}`` placeholders of the URL and body."""
        url = self.url.format(user_id=user_id) if user_id is not None else self.url
        return url, _render_body(self.body, user_id)


def _render_body(body: Any, user_id: int | None) -> Any:
    if body is None:
        return None
    if isinstance(body, dict):
        return {k: _render_body(v, user_id) for k, v in body.items()}
    if isinstance(body, list):
        return [_render_body(v, user_id) for v in body]
    if body == "{user_id}":
        return user_id
    return body


LOOKUP_USERNAME = Endpoint(
    name="lookup_username",
    method="POST",
    url="https://users.roblox.com/v1/usernames/users",
    timeout=TimeoutClass.LONG,
)

USER_DETAILS = Endpoint(
    name="user_details",
    method="GET",
    url="https://users.roblox.com/v1/users/{user_id}",
    timeout=TimeoutClass.LONG,
)

FOLLOWERS_COUNT = Endpoint(
    name="followers_count",
    method="GET",
    url="https://friends.roblox.com/v1/users/{user_id}/followers/count",
    timeout=TimeoutClass.LONG,
)

FOLLOWINGS_COUNT = Endpoint(
    name="followings_count",
    method="GET",
    url="https://friends.roblox.com/v1/users/{user_id}/followings/count",
    timeout=TimeoutClass.LONG,
)

FRIENDS_COUNT = Endpoint(
    name="friends_count",
    method="GET",
    url="https://friends.roblox.com/v1/users/{user_id}/friends/count",
)

GROUP_ROLES = Endpoint(
    name="group_roles",
    method="GET",
    url="https://groups.roblox.com/v1/users/{user_id}/groups/roles",
)

AVATAR = Endpoint(
    name="avatar",
    method="GET",
    url=(
        "https://thumbnails.roblox.com/v1/users/avatar"
        "?userIds={user_id}&size=420x420&format=Png&isCircular=false"
    ),
)

USERNAME_HISTORY = Endpoint(
    name="username_history",
    method="GET",
    url="https://users.roblox.com/v1/users/{user_id}/username-history?limit=10&sortOrder=Asc",
)

PRESENCE = Endpoint(
    name="presence",
    method="POST",
    url="https://presence.roblox.com/v1/presence/users",
    body={"userIds": ["{user_id}"]},
)

PROFILE_LINK_TEMPLATE = "https://www.roblox.com/users/{user_id}/profile"
