"""Tests for the keep-alive ping job, its scheduler and its startup toggle."""

from __future__ import annotations

import httpx
import pytest
from apscheduler.triggers.cron import CronTrigger
from fastapi.testclient import TestClient

import backend.api as wallet_api
from backend.jobs.keep_alive import KEEP_ALIVE_JOB_ID, KeepAliveJob, build_keep_alive_scheduler
from tests.fakes import RecordingRateLimiter


HEALTH_URL = "https://wallet.example.com/api/health"


@pytest.mark.asyncio
async def test_run_pings_health_url_and_reports_success() -> None:
    seen: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(f"{request.method} {request.url}")
        return httpx.Response(200, json={"status": "ok"})

    job = KeepAliveJob(HEALTH_URL, transport=httpx.MockTransport(_handler))

    assert await job.run() is True
    assert seen == [f"GET {HEALTH_URL}"]


@pytest.mark.asyncio
async def test_run_logs_unhealthy_status(caplog) -> None:
    job = KeepAliveJob(HEALTH_URL, transport=httpx.MockTransport(lambda request: httpx.Response(503)))

    assert await job.run() is False
    assert "keep_alive_ping_unhealthy" in caplog.text


@pytest.mark.asyncio
async def test_run_swallows_network_errors(caplog) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    job = KeepAliveJob(HEALTH_URL, transport=httpx.MockTransport(_handler))

    assert await job.run() is False
    assert await job.run() is False
    assert caplog.text.count("keep_alive_ping_failed") == 2


def test_scheduler_registers_single_cron_job() -> None:
    scheduler = build_keep_alive_scheduler(KeepAliveJob(HEALTH_URL), "*/14 * * * *")

    job = scheduler.get_job(KEEP_ALIVE_JOB_ID)

    assert job is not None
    assert isinstance(job.trigger, CronTrigger)
    assert "minute='*/14'" in str(job.trigger)
    assert job.max_instances == 1
    assert job.coalesce is True


class _SchedulerSpy:
    def __init__(self) -> None:
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def shutdown(self, wait: bool = True) -> None:
        self.stopped = True


def test_app_starts_and_stops_scheduler_when_enabled(monkeypatch) -> None:
    spy = _SchedulerSpy()
    built: list[tuple[str, str]] = []

    def _build(job: KeepAliveJob, cron: str) -> _SchedulerSpy:
        built.append((job.url, cron))
        return spy

    monkeypatch.setattr(wallet_api, "build_keep_alive_scheduler", _build)
    app = wallet_api.create_app(enable_keep_alive=True, keep_alive_url=HEALTH_URL, keep_alive_cron="*/5 * * * *")

    with TestClient(app):
        assert spy.started is True
        assert spy.stopped is False

    assert spy.stopped is True
    assert built == [(HEALTH_URL, "*/5 * * * *")]


def test_app_does_not_schedule_when_disabled(monkeypatch) -> None:
    def _build(job: KeepAliveJob, cron: str):
        raise AssertionError("scheduler must not be built")

    monkeypatch.setattr(wallet_api, "build_keep_alive_scheduler", _build)
    monkeypatch.setattr(wallet_api, "get_rate_limiter", lambda: RecordingRateLimiter())

    with TestClient(wallet_api.create_app(enable_keep_alive=False)) as client:
        assert client.get("/api/health").status_code == 200
