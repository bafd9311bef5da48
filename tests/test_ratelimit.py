"""Unit tests for the per-client sliding window limiter."""

from rbxprofile.ratelimit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowLimiter:

    def test_allows_up_to_max_requests(self):
        limiter = SlidingWindowLimiter(window_ms=1000, max_requests=3, clock=FakeClock())
        assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_clients_are_independent(self):
        limiter = SlidingWindowLimiter(window_ms=1000, max_requests=1, clock=FakeClock())
        assert limiter.hit("a") is True
        assert limiter.hit("a") is False
        assert limiter.hit("b") is True

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(window_ms=1000, max_requests=2, clock=clock)
        limiter.hit("a")
        clock.now = 0.5
        limiter.hit("a")
        assert limiter.hit("a") is False

        clock.now = 1.0
        assert limiter.hit("a") is True
        assert limiter.hit("a") is False

    def test_refused_requests_do_not_count(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(window_ms=1000, max_requests=1, clock=clock)
        limiter.hit("a")
        clock.now = 0.9
        assert limiter.hit("a") is False
        clock.now = 1.0
        assert limiter.hit("a") is True

    def test_prune_drops_idle_clients(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(window_ms=1000, max_requests=5, clock=clock)
        limiter.hit("a")
        clock.now = 0.8
        limiter.hit("b")
        clock.now = 1.5

        assert limiter.prune() == 1
        assert limiter.tracked_clients == 1
