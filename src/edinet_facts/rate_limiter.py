"""Shared rate limiter for EDINET API requests.

EDINET asks clients to stay at roughly one request per second and offers
no batch endpoint. One RateLimiter instance is created per client and passed
to every component that talks to the network, so all of them share a single
ceiling, including worker threads.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

log = logging.getLogger(__name__)


class RateLimiter:
    """Thread-safe minimum-interval limiter.

    throttle() returns only once at least 1/requests_per_second seconds have
    passed since the previous throttle() returned. The lock is held while
    sleeping, so concurrent callers queue up behind it and the effective
    rate never exceeds the ceiling.
    """

    def __init__(
        self,
        requests_per_second: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")
        self.requests_per_second = requests_per_second
        self.min_interval = 1.0 / requests_per_second
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request_time: float | None = None
        self.request_count = 0
        self.total_wait = 0.0

        log.debug(
            "Rate limiter initialized: %.2f req/sec (interval: %.3fs)",
            requests_per_second, self.min_interval,
        )

    def throttle(self) -> float:
        """Block until it is safe to issue the next request.

        Returns the time waited in seconds.
        """
        with self._lock:
            wait = 0.0
            if self._last_request_time is not None:
                elapsed = self._clock() - self._last_request_time
                if elapsed < self.min_interval:
                    wait = self.min_interval - elapsed
                    self._sleep(wait)
            self._last_request_time = self._clock()
            self.request_count += 1
            self.total_wait += wait
            return wait

    def stats(self) -> dict:
        """Get rate limiter statistics."""
        return {
            "requests_per_second": self.requests_per_second,
            "min_interval": self.min_interval,
            "total_requests": self.request_count,
            "total_wait": round(self.total_wait, 3),
        }
