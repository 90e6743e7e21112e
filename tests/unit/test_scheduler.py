"""
tests/unit/test_scheduler.py

Unit tests for scheduler.py and services/ip_cache.py.
The refresh job is driven with an AsyncMock IpService so no HTTP is involved.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from exceptions import AllEndpointsFailedError
from scheduler import create_scheduler, refresh_ip_job
from services.ip_cache import IpCache
from services.ip_service import QueryResult


def test_ip_cache_starts_empty():
    cache = IpCache()

    assert cache.is_empty()
    assert cache.ip is None
    assert cache.source is None
    assert cache.last_fetch is None


def test_ip_cache_update_stores_result():
    cache = IpCache()
    fetched_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    cache.update(QueryResult(ip="203.0.113.8", source="https://ip.example"), fetched_at)

    assert not cache.is_empty()
    assert cache.ip == "203.0.113.8"
    assert cache.source == "https://ip.example"
    assert cache.last_fetch == fetched_at


def test_ip_cache_update_defaults_to_now():
    cache = IpCache()

    cache.update(QueryResult(ip="203.0.113.8", source="https://ip.example"))

    assert datetime.now(timezone.utc) - cache.last_fetch < timedelta(seconds=5)


@pytest.mark.asyncio
async def test_refresh_ip_job_updates_cache():
    ip_service = AsyncMock()
    ip_service.query.return_value = QueryResult(ip="198.51.100.1", source="https://a.example")
    cache = IpCache()

    await refresh_ip_job(ip_service, cache)

    ip_service.query.assert_awaited_once()
    assert cache.ip == "198.51.100.1"
    assert cache.source == "https://a.example"


@pytest.mark.asyncio
async def test_refresh_ip_job_keeps_previous_ip_on_failure(caplog):
    """A failed refresh logs the error and keeps serving the last known IP."""
    caplog.set_level(logging.ERROR, logger="scheduler")
    cache = IpCache()
    cache.update(QueryResult(ip="198.51.100.1", source="https://a.example"))
    ip_service = AsyncMock()
    ip_service.query.side_effect = AllEndpointsFailedError()

    await refresh_ip_job(ip_service, cache)

    assert cache.ip == "198.51.100.1"
    assert "Error fetching IP" in caplog.text


def test_create_scheduler_registers_refresh_job():
    ip_service = AsyncMock()
    cache = IpCache()

    scheduler = create_scheduler(ip_service, cache, interval_seconds=3600)
    job = scheduler.get_job("ip_refresh")

    assert job is not None
    assert job.trigger.interval == timedelta(seconds=3600)
    assert job.kwargs == {"ip_service": ip_service, "ip_cache": cache}
    assert job.max_instances == 1


def test_create_scheduler_runs_refresh_on_startup():
    """The first refresh is due immediately, not one interval later."""
    scheduler = create_scheduler(AsyncMock(), IpCache(), interval_seconds=86400)
    job = scheduler.get_job("ip_refresh")

    assert abs(job.next_run_time - datetime.now(timezone.utc)) < timedelta(seconds=5)
