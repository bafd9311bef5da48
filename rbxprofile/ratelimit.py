"""Per-client sliding window rate limiting for the API."""

import time
from collections import deque
from typing import Callable


class SlidingWindowLimiter:
    """Allows at most ``max_requests`` per client within a rolling window."""

    def __init__(
        self,
        window_ms: int = 60000,
        max_requests: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize limiter.

        Args:
            window_ms: Window length in milliseconds
            max_requests: Requests allowed per client per window
            clock: Time source in seconds
        """
        self.window = window_ms / 1000
        self.max_requests = max_requests
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)

    def _trim(self, timestamps: deque[float], now: float) -> None:
        while timestamps and now - timestamps[0] >= self.window:
            timestamps.popleft()

    def hit(self, client_id: str) -> bool:
        """
        Record a request from a client if it fits in the window.

        Returns:
            True if allowed, False if the client is over its limit
        """
        now = self._clock()
        timestamps = self._requests.setdefault(client_id, deque())
        self._trim(timestamps, now)

        if len(timestamps) >= self.max_requests:
            return False

        timestamps.append(now)
        return True

    def prune(self) -> int:
        """
        Forget clients with no requests left in the window.

        Returns:
            Number of clients dropped
        """
        now = self._clock()
        idle = []
        for client_id, timestamps in self._requests.items():
            self._trim(timestamps, now)
            if not timestamps:
                idle.append(client_id)
        for client_id in idle:
            del self._requests[client_id]
        return len(idle)
