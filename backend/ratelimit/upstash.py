"""Rate limiter backed by Upstash Redis over its REST API."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from backend.ratelimit.limiter import RateLimitOutcome


@dataclass(slots=True)
class UpstashSettings:
    url: str
    token: str


class UpstashRedisClient:
    def __init__(self, settings: UpstashSettings, timeout: float = 5.0) -> None:
        self.settings = settings
        self.timeout = timeout

    def pipeline(self, commands: list[list[str | int]]) -> list[Any]:
        """Run commands in one round trip and return their results in order."""

        request = Request(
            url=f"{self.settings.url.rstrip('/')}/pipeline",
            headers={
                "Authorization": f"Bearer {self.settings.token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            data=json.dumps(commands).encode("utf-8"),
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout) as response:  # noqa: S310 - URL comes from trusted env config
                payload = json.loads(response.read().decode("utf-8"))
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(f"Upstash request failed with status {exc.code}: {body}") from exc
        except URLError as exc:
            raise RuntimeError(f"Upstash request failed: {exc.reason}") from exc

        if not isinstance(payload, list) or len(payload) != len(commands):
            raise RuntimeError("Upstash pipeline returned an unexpected payload")

        results: list[Any] = []
        for item in payload:
            if not isinstance(item, dict):
                raise RuntimeError("Upstash pipeline returned an unexpected payload")
            if item.get("error"):
                raise RuntimeError(f"Upstash command failed: {item['error']}")
            results.append(item.get("result"))
        return results


class UpstashRateLimiter:
    """Fixed-window limiter: one INCR+PEXPIRE pipeline per request."""

    def __init__(
        self,
        client: UpstashRedisClient,
        *,
        max_requests: int,
        window_seconds: int,
        prefix: str = "ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix
        self._clock = clock

    def limit(self, key: str) -> RateLimitOutcome:
        window = int(self._clock() // self.window_seconds)
        redis_key = f"{self.prefix}:{key}:{window}"
        used, _ = self._client.pipeline(
            [
                ["INCR", redis_key],
                ["PEXPIRE", redis_key, self.window_seconds * 1000],
            ]
        )
        used = int(used)
        return RateLimitOutcome(
            success=used <= self.max_requests,
            limit=self.max_requests,
            remaining=max(self.max_requests - used, 0),
            reset_at=float((window + 1) * self.window_seconds),
        )
