"""Rate limiter capability and process-local implementation."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Protocol

from fastapi import Request


RATE_LIMITED_MESSAGE = "Too many requests, please try again later."


@dataclass(frozen=True, slots=True)
class RateLimitOutcome:
    success: bool
    limit: int
    remaining: int
    reset_at: float


class RateLimiter(Protocol):
    def limit(self, key: str) -> RateLimitOutcome:
        """Record one request for `key` and return whether it is admitted."""


def client_key_from_request(request: Request) -> str:
    """Return the first X-Forwarded-For hop, else the peer address."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded is not None:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


class InMemoryRateLimiter:
    """Fixed-window counter per key, for local dev/tests when Upstash is not configured."""

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._counters: dict[str, tuple[int, int]] = {}
        self._lock = Lock()

    def limit(self, key: str) -> RateLimitOutcome:
        now = self._clock()
        window = int(now // self.window_seconds)
        with self._lock:
            current_window, used = self._counters.get(key, (window, 0))
            if current_window != window:
                used = 0
            used += 1
            self._counters[key] = (window, used)
            # Drop counters of elapsed windows so idle keys do not accumulate.
            if len(self._counters) > 10_000:
                self._counters = {
                    counter_key: value
                    for counter_key, value in self._counters.items()
                    if value[0] == window
                }

        return RateLimitOutcome(
            success=used <= self.max_requests,
            limit=self.max_requests,
            remaining=max(self.max_requests - used, 0),
            reset_at=(window + 1) * self.window_seconds,
        )
