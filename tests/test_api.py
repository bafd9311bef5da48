"""Tests for the FastAPI app - fake upstream behind httpx.MockTransport, no internet."""

import pytest
from fastapi.testclient import TestClient

from rbxprofile.api import create_app


@pytest.fixture
def api(test_config, fake_roblox):
    with TestClient(create_app(test_config, transport=fake_roblox.transport())) as client:
        yield client


class TestSystemRoutes:

    def test_root_lists_endpoints(self, api):
        response = api.get("/")
        assert response.status_code == 200
        assert "/api/roblox/{username}" in response.json()["endpoints"]

    def test_health(self, api):
        response = api.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["cache_entries"] == 0


class TestProfileRoute:

    @pytest.mark.parametrize("method", ["GET", "POST"])
    def test_profile(self, api, method):
        response = api.request(method, "/api/roblox/builderman")
        body = response.json()

        assert response.status_code == 200
        assert body["user_id"] == 156
        assert body["online_status"] == "Online"
        assert body["profile_link"] == "https://www.roblox.com/users/156/profile"

    def test_second_request_served_from_cache(self, api, fake_roblox):
        api.get("/api/roblox/builderman")
        api.get("/api/roblox/BuilderMan")
        assert fake_roblox.calls_to("lookup_username") == 1

    def test_force_refresh(self, api, fake_roblox):
        api.get("/api/roblox/builderman")
        api.get("/api/roblox/builderman", params={"force_refresh": True})
        assert fake_roblox.calls_to("lookup_username") == 2

    def test_user_not_found(self, api):
        response = api.get("/api/roblox/doesnotexist123")
        assert response.status_code == 404
        assert response.json()["error"] == "UserNotFound"

    def test_blank_username(self, api, fake_roblox):
        response = api.get("/api/roblox/%20")
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"
        assert fake_roblox.calls == []

    def test_upstream_failure_status(self, api, fake_roblox):
        fake_roblox.fail("user_details", status=503)
        response = api.get("/api/roblox/builderman")
        assert response.status_code == 503
        assert response.json()["error"] == "UpstreamUnavailable"

    def test_upstream_throttling(self, api, fake_roblox):
        fake_roblox.fail("lookup_username", status=429)
        response = api.get("/api/roblox/builderman")
        assert response.status_code == 429
        assert response.json()["retry_after_seconds"] == 30
        assert response.headers["Retry-After"] == "30"


class TestRateLimit:

    def test_limit_per_client(self, test_config, fake_roblox):
        config = test_config.model_copy(update={"rate_limit_max_requests": 2})
        with TestClient(create_app(config, transport=fake_roblox.transport())) as client:
            assert client.get("/api/roblox/builderman").status_code == 200
            assert client.get("/api/roblox/builderman").status_code == 200
            response = client.get("/api/roblox/builderman")

        assert response.status_code == 429
        assert response.json()["message"] == "Too many requests, please try again later."
        assert response.headers["Retry-After"] == "60"

    def test_system_routes_not_limited(self, test_config, fake_roblox):
        config = test_config.model_copy(update={"rate_limit_max_requests": 1})
        with TestClient(create_app(config, transport=fake_roblox.transport())) as client:
            for _ in range(3):
                assert client.get("/health").status_code == 200


class TestCacheRoutes:

    def test_stats_lists_keys(self, api):
        api.get("/api/roblox/builderman")
        body = api.get("/cache/stats").json()

        assert body["backend"] == "memory"
        assert body["entries"] == 1
        assert body["keys"] == ["user:builderman"]
        assert body["key_count"] == 1

    def test_clear(self, api):
        api.get("/api/roblox/builderman")
        body = api.post("/cache/clear").json()

        assert body["cleared_entries"] == 1
        assert api.get("/cache/stats").json()["entries"] == 0

    def test_delete_user(self, api):
        api.get("/api/roblox/builderman")

        first = api.delete("/cache/user/BuilderMan").json()
        second = api.delete("/cache/user/BuilderMan").json()

        assert first["deleted"] is True
        assert first["cache_key"] == "user:builderman"
        assert first["message"] == "User cache cleared"
        assert second["deleted"] is False
        assert second["message"] == "User not found in cache"
