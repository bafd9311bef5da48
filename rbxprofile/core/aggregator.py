"""Concurrent enrichment calls with per-field fallbacks."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from rbxprofile.core.client import FailureKind, UpstreamClient, UpstreamResult
from rbxprofile.core.endpoints import (
    AVATAR,
    FOLLOWERS_COUNT,
    FOLLOWINGS_COUNT,
    FRIENDS_COUNT,
    GROUP_ROLES,
    PRESENCE,
    USERNAME_HISTORY,
    Endpoint,
)
from rbxprofile.logging import get_logger

DEFAULT_AVATAR_URL = "https://via.placeholder.com/150"

UNKNOWN_PRESENCE = "Unknown"

PRESENCE_LABELS: dict[int, str] = {
    0: "Offline",
    1: "Online",
    2: "In Game",
    3: "In Studio",
}

ENRICHMENT_ENDPOINTS: tuple[Endpoint, ...] = (
    FOLLOWERS_COUNT,
    FOLLOWINGS_COUNT,
    FRIENDS_COUNT,
    GROUP_ROLES,
    AVATAR,
    USERNAME_HISTORY,
    PRESENCE,
)


@dataclass
class EnrichmentFields:
    """Best-effort fields; each one already defaulted if its call failed."""

    followers: int = 0
    followings: int = 0
    friends: int = 0
    groups_count: int = 0
    avatar: str = DEFAULT_AVATAR_URL
    previous_usernames: list[str] = field(default_factory=list)
    online_status: str = UNKNOWN_PRESENCE
    failed_calls: list[str] = field(default_factory=list)


def presence_label(code: Any) -> str:
    """Map a presence type code to its label, "Unknown" for anything unmapped."""
    if isinstance(code, bool) or not isinstance(code, int):
        return UNKNOWN_PRESENCE
    return PRESENCE_LABELS.get(code, UNKNOWN_PRESENCE)


def extract_count(payload: Any) -> int:
    """Count endpoints answer ``{"count": n}``; a bare integer is accepted too."""
    value = payload.get("count") if isinstance(payload, dict) else payload
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return max(value, 0)


def extract_group_count(payload: Any) -> int:
    groups = payload.get("data") if isinstance(payload, dict) else None
    return len(groups) if isinstance(groups, list) else 0


def extract_avatar(payload: Any, placeholder: str = DEFAULT_AVATAR_URL) -> str:
    entries = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(entries, list) and entries and isinstance(entries[0], dict):
        url = entries[0].get("imageUrl")
        if isinstance(url, str) and url:
            return url
    return placeholder


def extract_username_history(payload: Any) -> list[str]:
    """Previous usernames in upstream order (ascending, most recent last)."""
    entries = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        return []

    names = []
    for entry in entries:
        if isinstance(entry, str):
            name = entry
        elif isinstance(entry, dict):
            name = entry.get("name") or entry.get("username")
        else:
            continue
        if isinstance(name, str) and name:
            names.append(name)
    return names


def extract_presence(payload: Any) -> str:
    presences = payload.get("userPresences") if isinstance(payload, dict) else None
    if not isinstance(presences, list) or not presences or not isinstance(presences[0], dict):
        return UNKNOWN_PRESENCE
    return presence_label(presences[0].get("userPresenceType"))


class EnrichmentAggregator:
    """
    Fires every enrichment call at once and waits for all of them to settle.

    A failed or malformed call only affects its own field, which falls back
    to its default.
    """

    def __init__(self, client: UpstreamClient, avatar_placeholder: str = DEFAULT_AVATAR_URL):
        self.client = client
        self.avatar_placeholder = avatar_placeholder
        self._log = get_logger("aggregator")

    async def collect(self, user_id: int) -> EnrichmentFields:
        """
        Gather enrichment fields for a user.

        Args:
            user_id: Resolved Roblox user id

        Returns:
            EnrichmentFields, fully populated
        """
        settled = await asyncio.gather(
            *(self.client.call(endpoint, user_id=user_id) for endpoint in ENRICHMENT_ENDPOINTS),
            return_exceptions=True,
        )
        results = {
            endpoint.name: self._as_result(endpoint, outcome)
            for endpoint, outcome in zip(ENRICHMENT_ENDPOINTS, settled)
        }

        def payload(endpoint: Endpoint) -> Any:
            result = results[endpoint.name]
            return result.payload if result.ok else None

        fields = EnrichmentFields(
            followers=extract_count(payload(FOLLOWERS_COUNT)),
            followings=extract_count(payload(FOLLOWINGS_COUNT)),
            friends=extract_count(payload(FRIENDS_COUNT)),
            groups_count=extract_group_count(payload(GROUP_ROLES)),
            avatar=extract_avatar(payload(AVATAR), self.avatar_placeholder),
            previous_usernames=extract_username_history(payload(USERNAME_HISTORY)),
            online_status=extract_presence(payload(PRESENCE)),
            failed_calls=[name for name, result in results.items() if not result.ok],
        )

        if fields.failed_calls:
            self._log.info(
                "enrichment_degraded",
                user_id=user_id,
                failed_calls=fields.failed_calls,
            )
        return fields

    def _as_result(self, endpoint: Endpoint, outcome: Any) -> UpstreamResult:
        if isinstance(outcome, UpstreamResult):
            return outcome
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        # The client classifies every expected failure; anything else is a bug
        # in the call path, still confined to this one field.
        self._log.error("enrichment_call_crashed", endpoint=endpoint.name, error=repr(outcome))
        return UpstreamResult.failed(endpoint.name, FailureKind.NETWORK, repr(outcome))
