"""
Integration tests - live lookups against the public Roblox APIs.

These tests require internet and should be run sparingly to avoid rate limiting.

Run with: pytest tests/test_integration_lookup.py -m integration -v
"""

import pytest

from rbxprofile.config import AggregatorConfig, CacheBackend
from rbxprofile.core.orchestrator import ProfileAggregator
from rbxprofile.exceptions import UserNotFoundError

# Mark all tests in this module as integration tests (slow, requires internet)
pytestmark = pytest.mark.integration

TEST_ACCOUNTS = {
    "builderman": {"user_id": 156},
    "Roblox": {"user_id": 1},
}


@pytest.fixture
def live_config() -> AggregatorConfig:
    return AggregatorConfig(
        cache_backend=CacheBackend.MEMORY,
        cache_sweep_interval_seconds=0,
        log_level="WARNING",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("username,expected", TEST_ACCOUNTS.items())
async def test_live_profile(live_config, username, expected):
    async with ProfileAggregator(live_config) as aggregator:
        profile = await aggregator.fetch_profile(username)

    assert profile.user_id == expected["user_id"]
    assert profile.username.lower() == username.lower()
    assert profile.estimated_creation_date != "N/A"
    assert profile.age_days > 0
    assert profile.profile_link.endswith(f"/users/{expected['user_id']}/profile")


@pytest.mark.asyncio
async def test_live_unknown_user(live_config):
    async with ProfileAggregator(live_config) as aggregator:
        with pytest.raises(UserNotFoundError):
            await aggregator.fetch_profile("doesnotexist123zzqq98")


@pytest.mark.asyncio
async def test_live_batch_keeps_order(live_config):
    async with ProfileAggregator(live_config) as aggregator:
        results = await aggregator.lookup_many(list(TEST_ACCOUNTS))

    assert [r.profile.user_id for r in results] == [e["user_id"] for e in TEST_ACCOUNTS.values()]
