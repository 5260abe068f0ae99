"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true", "yes"}
_FALSE_VALUES = {"0", "false", "no"}


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw_value = (get_env(name, "") or "").strip()
    if not raw_value:
        return default
    try:
        value = int(raw_value)
    except ValueError:
        logger.warning("config_invalid_int name=%s value=%s default=%s", name, raw_value, default)
        return default
    if value <= 0:
        logger.warning("config_non_positive_int name=%s value=%s default=%s", name, value, default)
        return default
    return value


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def is_production() -> bool:
    return app_env().lower() in {"production", "prod"}


def port() -> int:
    """Return the HTTP listening port."""
    return _get_int("PORT", 5001)


def host() -> str:
    return (get_env("HOST", "0.0.0.0") or "0.0.0.0").strip() or "0.0.0.0"


def log_level() -> str:
    return (get_env("LOG_LEVEL", "info") or "info").strip().lower() or "info"


def api_url() -> str:
    """Return the public base URL of this API, including the `/api` prefix."""
    raw_value = (get_env("API_URL", "") or "").strip()
    if raw_value:
        return raw_value.rstrip("/")
    return f"http://localhost:{port()}/api"


def keep_alive_enabled() -> bool:
    """Return whether the keep-alive job should run.

    An explicit `KEEP_ALIVE_ENABLED` wins; otherwise it only runs in production.
    """
    raw_value = (get_env("KEEP_ALIVE_ENABLED", "") or "").strip().lower()
    if raw_value in _TRUE_VALUES:
        return True
    if raw_value in _FALSE_VALUES:
        return False
    return is_production()


def keep_alive_url() -> str:
    """Return the URL pinged by the keep-alive job."""
    raw_value = (get_env("KEEP_ALIVE_URL", "") or "").strip()
    if raw_value:
        return raw_value
    if is_production() and not (get_env("API_URL", "") or "").strip():
        logger.warning("keep_alive_url_defaults_to_localhost set KEEP_ALIVE_URL or API_URL")
    return f"{api_url()}/health"


def keep_alive_cron() -> str:
    """Return the crontab expression of the keep-alive job (every 14 minutes by default)."""
    return (get_env("KEEP_ALIVE_CRON", "") or "").strip() or "*/14 * * * *"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins, all origins when unset."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    return parsed_origins or ["*"]


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def upstash_redis_rest_url() -> str | None:
    return get_env("UPSTASH_REDIS_REST_URL")


def upstash_redis_rest_token() -> str | None:
    return get_env("UPSTASH_REDIS_REST_TOKEN")


def rate_limit_requests() -> int:
    """Return how many requests a client may issue per window."""
    return _get_int("RATE_LIMIT_REQUESTS", 100)


def rate_limit_window_seconds() -> int:
    return _get_int("RATE_LIMIT_WINDOW_SECONDS", 60)


def wallet_api_url() -> str:
    """Return the API base URL used by the mobile data client."""
    raw_value = (get_env("WALLET_API_URL", "") or "").strip()
    return (raw_value or "http://localhost:5001/api").rstrip("/")
