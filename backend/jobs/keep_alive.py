"""Periodic self-ping keeping the hosted instance from idling.

The job only issues `GET <keep-alive url>`; failures are logged and the next
cron tick simply tries again.
"""

from __future__ import annotations

import logging

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

KEEP_ALIVE_JOB_ID = "keep_alive"


class KeepAliveJob:
    def __init__(self, url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def run(self) -> bool:
        """Ping the health endpoint once and report whether it answered 2xx."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url)
        except Exception:
            logger.exception("keep_alive_ping_failed url=%s", self.url)
            return False

        if response.is_success:
            logger.info("keep_alive_ping_ok url=%s status_code=%s", self.url, response.status_code)
            return True

        logger.warning("keep_alive_ping_unhealthy url=%s status_code=%s", self.url, response.status_code)
        return False


def build_keep_alive_scheduler(job: KeepAliveJob, cron: str) -> AsyncIOScheduler:
    """Create a scheduler running `job` on the crontab expression `cron`."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        job.run,
        trigger=CronTrigger.from_crontab(cron),
        id=KEEP_ALIVE_JOB_ID,
        name="Keep-alive health ping",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info("keep_alive_scheduled url=%s cron=%s", job.url, cron)
    return scheduler
