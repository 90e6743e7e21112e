"""
scheduler.py

Responsibility: Sets up the APScheduler AsyncIOScheduler and registers the
public IP refresh job. Exposes a create helper.
Does NOT: contain the race logic or HTTP calls directly; those are delegated
entirely to IpService.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from exceptions import AllEndpointsFailedError
from services.ip_cache import IpCache
from services.ip_service import IpService

logger = logging.getLogger(__name__)

# Job ID used to identify the refresh job in APScheduler
_JOB_ID = "ip_refresh"


# ---------------------------------------------------------------------------
# Scheduler job
# ---------------------------------------------------------------------------


async def refresh_ip_job(ip_service: IpService, ip_cache: IpCache) -> None:
    """
    APScheduler job: runs one query and stores the result in the cache.

    A failed query is logged and the previously cached IP is kept, so the
    server keeps serving the last known value until the next run.

    Args:
        ip_service: The IpService racing the configured endpoints.
        ip_cache: The in-memory cache served by the routes.

    Returns:
        None
    """
    logger.debug("IP refresh job triggered.")
    try:
        result = await ip_service.query()
    except AllEndpointsFailedError as exc:
        logger.error("Error fetching IP: %s", exc)
        return
    ip_cache.update(result)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_scheduler(
    ip_service: IpService,
    ip_cache: IpCache,
    interval_seconds: int,
) -> AsyncIOScheduler:
    """
    Creates and returns a configured AsyncIOScheduler with the refresh job.

    The job runs immediately on startup (next_run_time=now) and then at the
    configured interval.

    Args:
        ip_service: The IpService to pass into the job.
        ip_cache: The IpCache to pass into the job.
        interval_seconds: Seconds between refreshes.

    Returns:
        A configured but not yet started AsyncIOScheduler.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        refresh_ip_job,
        trigger="interval",
        seconds=interval_seconds,
        id=_JOB_ID,
        kwargs={"ip_service": ip_service, "ip_cache": ip_cache},
        # NOTE: next_run_time=now fetches the IP at startup instead of
        # serving 503 for a whole interval.
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
    )
    logger.info("IP refresh job scheduled, interval: %ds.", interval_seconds)
    return scheduler

