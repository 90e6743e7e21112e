"""
services/ip_cache.py

Responsibility: Holds the last public IP obtained by the background refresh
job, in memory, for the HTTP routes to serve.
Does NOT: query endpoints or persist anything across restarts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from services.ip_service import QueryResult

logger = logging.getLogger(__name__)


class IpCache:
    """
    Last known public IP, its source endpoint, and when it was fetched.

    Written by the scheduler job and read by route handlers; both run on the
    same event loop, so no locking is needed.
    """

    def __init__(self) -> None:
        self._ip: str | None = None
        self._source: str | None = None
        self._last_fetch: datetime | None = None

    @property
    def ip(self) -> str | None:
        return self._ip

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def last_fetch(self) -> datetime | None:
        return self._last_fetch

    def is_empty(self) -> bool:
        return self._ip is None

    def update(self, result: QueryResult, fetched_at: datetime | None = None) -> None:
        """
        Stores a fresh query result.

        Args:
            result: The winning QueryResult of a refresh.
            fetched_at: Timestamp of the fetch; now (UTC) when omitted.
        """
        self._ip = result.ip
        self._source = result.source
        self._last_fetch = fetched_at or datetime.now(timezone.utc)
        logger.info("IP updated: %s at %s", self._ip, self._last_fetch.isoformat())
