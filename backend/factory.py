"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.ratelimit import (
    InMemoryRateLimiter,
    RateLimiter,
    UpstashRateLimiter,
    UpstashRedisClient,
    UpstashSettings,
)
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
    TransactionsRepository,
)
from backend.services.transaction_service import TransactionService
from shared import config


logger = logging.getLogger(__name__)


def build_transactions_repository() -> TransactionsRepository:
    """Return the Supabase repository when configured, else an in-memory one."""

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        client = SupabaseClient(settings=SupabaseSettings(url=supabase_url, service_role_key=supabase_key))
        return SupabaseTransactionsRepository(client=client)

    logger.warning("transactions_repository_in_memory reason=supabase_not_configured")
    return InMemoryTransactionsRepository()


def build_transaction_service() -> TransactionService:
    return TransactionService(transactions_repository=build_transactions_repository())


def build_rate_limiter() -> RateLimiter:
    """Return the Upstash limiter when configured, else a process-local one."""

    max_requests = config.rate_limit_requests()
    window_seconds = config.rate_limit_window_seconds()
    upstash_url = config.upstash_redis_rest_url()
    upstash_token = config.upstash_redis_rest_token()
    if upstash_url and upstash_token:
        client = UpstashRedisClient(settings=UpstashSettings(url=upstash_url, token=upstash_token))
        return UpstashRateLimiter(client, max_requests=max_requests, window_seconds=window_seconds)

    logger.warning("rate_limiter_in_memory reason=upstash_not_configured")
    return InMemoryRateLimiter(max_requests=max_requests, window_seconds=window_seconds)
