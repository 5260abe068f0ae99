"""Request admission by client key."""

from backend.ratelimit.limiter import (
    RATE_LIMITED_MESSAGE,
    InMemoryRateLimiter,
    RateLimiter,
    RateLimitOutcome,
    client_key_from_request,
)
from backend.ratelimit.upstash import UpstashRateLimiter, UpstashRedisClient, UpstashSettings

__all__ = [
    "RATE_LIMITED_MESSAGE",
    "InMemoryRateLimiter",
    "RateLimitOutcome",
    "RateLimiter",
    "UpstashRateLimiter",
    "UpstashRedisClient",
    "UpstashSettings",
    "client_key_from_request",
]
