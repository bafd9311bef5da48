"""Shared test helpers - a fake Roblox API behind httpx.MockTransport, no internet."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from rbxprofile.config import AggregatorConfig, CacheBackend
from rbxprofile.models.profile import AggregatedProfile

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ROUTES = [
    ("POST", r"users\.roblox\.com/v1/usernames/users$", "lookup_username"),
    ("GET", r"users\.roblox\.com/v1/users/\d+/username-history$", "username_history"),
    ("GET", r"users\.roblox\.com/v1/users/\d+$", "user_details"),
    ("GET", r"friends\.roblox\.com/v1/users/\d+/followers/count$", "followers_count"),
    ("GET", r"friends\.roblox\.com/v1/users/\d+/followings/count$", "followings_count"),
    ("GET", r"friends\.roblox\.com/v1/users/\d+/friends/count$", "friends_count"),
    ("GET", r"groups\.roblox\.com/v1/users/\d+/groups/roles$", "group_roles"),
    ("GET", r"thumbnails\.roblox\.com/v1/users/avatar$", "avatar"),
    ("POST", r"presence\.roblox\.com/v1/presence/users$", "presence"),
]


def load_upstream_fixture(name: str) -> dict[str, Any]:
    """Load recorded upstream payloads, keyed by endpoint name."""
    return json.loads((FIXTURES_DIR / f"{name}.json").read_text(encoding="utf-8"))


class FakeRoblox:
    """Routes httpx requests to canned payloads and records every call."""

    def __init__(self, fixture: str = "builderman"):
        self.payloads = load_upstream_fixture(fixture)
        self.failures: dict[str, Any] = {}
        self.calls: list[str] = []
        self.requests: list[httpx.Request] = []

    def fail(self, endpoint: str, status: int = 500, exc: Exception | None = None) -> None:
        """Make an endpoint answer with an error status or raise a transport error."""
        self.failures[endpoint] = exc if exc is not None else status

    def override(self, endpoint: str, payload: Any) -> None:
        """Replace an endpoint's payload; an httpx.Response is returned as-is."""
        self.payloads[endpoint] = payload

    def calls_to(self, endpoint: str) -> int:
        return self.calls.count(endpoint)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = self._route(request)
        self.calls.append(name)
        self.requests.append(request)

        failure = self.failures.get(name)
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(
                failure,
                json={"errors": [{"code": 0, "message": f"HTTP {failure}"}]},
            )

        payload = self.payloads[name]
        if isinstance(payload, httpx.Response):
            return payload

        if name == "lookup_username":
            requested = [u.lower() for u in json.loads(request.content)["usernames"]]
            matches = [u for u in payload["data"] if u["name"].lower() in requested]
            return httpx.Response(200, json={"data": matches})

        return httpx.Response(200, json=payload)

    def _route(self, request: httpx.Request) -> str:
        target = f"{request.url.host}{request.url.path}"
        for method, pattern, name in ROUTES:
            if request.method == method and re.search(pattern, target):
                return name
        raise AssertionError(f"Unexpected upstream request: {request.method} {request.url}")


@pytest.fixture
def fake_roblox() -> FakeRoblox:
    return FakeRoblox()


@pytest.fixture
def test_config() -> AggregatorConfig:
    """Fast, quiet configuration with the in-memory cache."""
    return AggregatorConfig(
        cache_backend=CacheBackend.MEMORY,
        batch_delay_ms=0,
        cache_sweep_interval_seconds=0,
        log_level="WARNING",
    )


@pytest.fixture
def sample_profile() -> AggregatedProfile:
    return AggregatedProfile(
        user_id=156,
        username="builderman",
        display_name="Builderman",
        estimated_creation_date="2006-02-27",
        account_age="20 years, 2 months, 10 days",
        age_days=7380,
        followers=11234567,
        followings=12,
        friends=7,
        groups_count=3,
        verified=True,
        description="Welcome to the Roblox Building Community!",
        avatar="https://tr.rbxcdn.com/30DAY-Avatar-156/420/420/Avatar/Png/noFilter",
        previous_usernames=["builder", "bman2006"],
        active_status="Active",
        online_status="Online",
        profile_link="https://www.roblox.com/users/156/profile",
        last_updated=datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
