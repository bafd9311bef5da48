"""Unit tests for structlog processors and lookup context binding."""

import structlog

from rbxprofile.logging import bind_lookup
from rbxprofile.logging.setup import add_service, round_timings


class TestProcessors:

    def test_add_service(self):
        assert add_service(None, "info", {"event": "lookup_start"})["service"] == "rbxprofile"

    def test_add_service_keeps_explicit_value(self):
        assert add_service(None, "info", {"service": "worker"})["service"] == "worker"

    def test_round_timings(self):
        event = round_timings(None, "info", {
            "event": "lookup_complete",
            "duration_ms": 12.3456,
            "age_seconds": 1.23456,
            "retry_after_seconds": 30,
            "user_id": 156,
        })

        assert event["duration_ms"] == 12.3
        assert event["age_seconds"] == 1.235
        assert event["retry_after_seconds"] == 30
        assert event["user_id"] == 156


class TestBindLookup:

    def test_fields_bound_inside_block_only(self):
        with bind_lookup(username="builderman"):
            with bind_lookup(user_id=156):
                assert structlog.contextvars.get_contextvars() == {
                    "username": "builderman",
                    "user_id": 156,
                }
            assert structlog.contextvars.get_contextvars() == {"username": "builderman"}

        assert structlog.contextvars.get_contextvars() == {}
