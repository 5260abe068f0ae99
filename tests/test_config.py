"""Tests for shared configuration helpers."""

from shared import config


def test_port_defaults_to_5001(monkeypatch) -> None:
    monkeypatch.delenv("PORT", raising=False)

    assert config.port() == 5001


def test_port_invalid_value_falls_back_with_warning(monkeypatch, caplog) -> None:
    monkeypatch.setenv("PORT", "eighty")

    assert config.port() == 5001
    assert "config_invalid_int name=PORT" in caplog.text


def test_keep_alive_enabled_only_in_production_by_default(monkeypatch) -> None:
    monkeypatch.delenv("KEEP_ALIVE_ENABLED", raising=False)
    monkeypatch.setenv("APP_ENV", "dev")
    assert config.keep_alive_enabled() is False

    monkeypatch.setenv("APP_ENV", "production")
    assert config.keep_alive_enabled() is True


def test_keep_alive_explicit_flag_overrides_app_env(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("KEEP_ALIVE_ENABLED", "false")
    assert config.keep_alive_enabled() is False

    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("KEEP_ALIVE_ENABLED", "1")
    assert config.keep_alive_enabled() is True


def test_keep_alive_url_derives_from_api_url(monkeypatch) -> None:
    monkeypatch.delenv("KEEP_ALIVE_URL", raising=False)
    monkeypatch.setenv("API_URL", "https://wallet.onrender.com/api/")

    assert config.keep_alive_url() == "https://wallet.onrender.com/api/health"


def test_keep_alive_url_warns_when_production_falls_back_to_localhost(monkeypatch, caplog) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("KEEP_ALIVE_URL", raising=False)
    monkeypatch.delenv("API_URL", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    assert config.keep_alive_url() == "http://localhost:5001/api/health"
    assert "keep_alive_url_defaults_to_localhost" in caplog.text


def test_keep_alive_url_does_not_warn_outside_production(monkeypatch, caplog) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("KEEP_ALIVE_URL", raising=False)
    monkeypatch.delenv("API_URL", raising=False)

    config.keep_alive_url()

    assert "keep_alive_url_defaults_to_localhost" not in caplog.text


def test_api_url_defaults_to_local_port(monkeypatch) -> None:
    monkeypatch.delenv("API_URL", raising=False)
    monkeypatch.setenv("PORT", "8080")

    assert config.api_url() == "http://localhost:8080/api"


def test_keep_alive_cron_defaults_to_every_14_minutes(monkeypatch) -> None:
    monkeypatch.delenv("KEEP_ALIVE_CRON", raising=False)

    assert config.keep_alive_cron() == "*/14 * * * *"


def test_rate_limit_defaults(monkeypatch) -> None:
    monkeypatch.delenv("RATE_LIMIT_REQUESTS", raising=False)
    monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "0")

    assert config.rate_limit_requests() == 100
    assert config.rate_limit_window_seconds() == 60


def test_cors_allow_origins_parses_comma_separated_list(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.com, https://b.com")

    assert config.cors_allow_origins() == ["https://a.com", "https://b.com"]


def test_cors_allow_origins_defaults_to_any(monkeypatch) -> None:
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    assert config.cors_allow_origins() == ["*"]


def test_wallet_api_url_strips_trailing_slash(monkeypatch) -> None:
    monkeypatch.setenv("WALLET_API_URL", "https://wallet.onrender.com/api/")

    assert config.wallet_api_url() == "https://wallet.onrender.com/api"
