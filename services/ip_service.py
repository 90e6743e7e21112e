"""
services/ip_service.py

Responsibility: Determines the host's public IP address by racing several
independent echo services and returning the first valid answer.
Does NOT: cache results, retry failed endpoints, or configure logging.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections.abc import Iterable
from dataclasses import dataclass

import httpx

from exceptions import AllEndpointsFailedError, EndpointFetchError, ParseError
from services.ip_parser import parse_ip

# NOTE: Every endpoint answers a plain GET with a text body that is either a
# bare address or contains an "ip=<address>" line.
DEFAULT_ENDPOINTS: tuple[str, ...] = (
    "https://cloudflare.com/cdn-cgi/trace",
    "https://checkip.amazonaws.com",
    "https://api.ipify.org",
    "https://icanhazip.com",
    "https://myexternalip.com/raw",
    "https://ipinfo.io/ip",
    "https://ipecho.net/plain",
    "https://ifconfig.me/ip",
    "https://ident.me",
    "https://whatismyip.akamai.com",
    "https://wgetip.com",
    "https://ip.tyk.nu",
)

# Upper bound, in seconds, for a single endpoint request.
DEFAULT_TIMEOUT = 5.0

_null_logger = logging.getLogger(f"{__name__}.null")
_null_logger.addHandler(logging.NullHandler())
_null_logger.propagate = False


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of a successful IpService.query() call.

    Attributes:
        ip: The public address in canonical form.
        source: URL of the endpoint that produced it.
        elapsed: Seconds between the start of the race and the win.
        position: Zero-based completion rank of the winning report.
    """

    ip: str
    source: str
    elapsed: float = 0.0
    position: int = 0


class IpService:
    """
    Races every configured echo endpoint and returns the first valid IP.

    Each query shuffles a private copy of the endpoint list, starts one task
    per endpoint on the injected httpx.AsyncClient, and collects the tasks in
    completion order. The first task that yields an address wins; every other
    task is cancelled and awaited before query() returns.

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
        - logging.Logger: optional; defaults to a logger that discards records
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoints: Iterable[str] = DEFAULT_ENDPOINTS,
        timeout: float = DEFAULT_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialises the service.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            endpoints: URLs of the echo services to race.
            timeout: Per-request upper bound in seconds.
            logger: Receives the success/failure diagnostics of each query.

        Raises:
            ValueError: If no endpoint is given or the timeout is not a positive
                finite number.
        """
        self._client = http_client
        self._endpoints = tuple(endpoints)
        if not self._endpoints:
            raise ValueError("at least one endpoint is required")
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"timeout must be a positive finite number, got {timeout!r}")
        self._timeout = timeout
        self._logger = logger or _null_logger

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    @property
    def timeout(self) -> float:
        return self._timeout

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def query(self) -> QueryResult:
        """
        Returns the host's public IP from the fastest endpoint that answers
        with a valid address.

        Returns:
            A QueryResult holding the address and the URL that produced it.

        Raises:
            AllEndpointsFailedError: If every endpoint failed. Individual
                failures are only reported to the logger.
        """
        start = time.perf_counter()

        endpoints = list(self._endpoints)
        random.shuffle(endpoints)

        tasks = {asyncio.create_task(self._fetch(url)): url for url in endpoints}
        pending = set(tasks)
        position = 0
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                # Collect every report in the batch before returning a winner.
                winner = None
                for task in done:
                    exc = task.exception()
                    if exc is None:
                        winner = winner or task
                        continue
                    if isinstance(exc, EndpointFetchError):
                        self._logger.debug("Endpoint failed: %s", exc)
                    else:
                        self._logger.warning("Unexpected error from %s: %r", tasks[task], exc)
                    position += 1

                if winner is not None:
                    url = tasks[winner]
                    elapsed = time.perf_counter() - start
                    self._logger.debug(
                        "Fetch completed (elapsed: %.3fs, pos: %d, url: %s)",
                        elapsed,
                        position,
                        url,
                    )
                    return QueryResult(ip=winner.result(), source=url, elapsed=elapsed, position=position)
        finally:
            # Also reached when the caller cancels query() itself.
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        self._logger.error("All %d endpoints failed.", len(endpoints))
        raise AllEndpointsFailedError()

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _fetch(self, url: str) -> str:
        """
        Fetches one endpoint and parses its body.

        The timeout is handed to httpx and also enforced around the whole
        request, so a transport that ignores httpx timeouts still cannot
        stall the race.

        Args:
            url: The endpoint to query.

        Returns:
            The canonical IP reported by the endpoint.

        Raises:
            EndpointFetchError: On any request, status, or parse failure.
        """
        try:
            response = await asyncio.wait_for(
                self._client.get(url, timeout=self._timeout, follow_redirects=True),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.text
        except asyncio.TimeoutError as exc:
            raise EndpointFetchError(url, f"timed out after {self._timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise EndpointFetchError(url, f"status {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EndpointFetchError(url, str(exc) or type(exc).__name__) from exc

        try:
            return parse_ip(body)
        except ParseError as exc:
            raise EndpointFetchError(url, str(exc)) from exc


async def fetch_external_ip(
    endpoints: Iterable[str] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> QueryResult:
    """
    Runs a single query on a short-lived HTTP client.

    Convenience for callers that do not manage their own httpx.AsyncClient.

    Args:
        endpoints: URLs to race; the built-in list when omitted.
        timeout: Per-request upper bound in seconds.
        logger: Receives the query diagnostics.

    Returns:
        The winning QueryResult.

    Raises:
        AllEndpointsFailedError: If every endpoint failed.
    """
    async with httpx.AsyncClient() as client:
        service = IpService(
            client,
            endpoints=DEFAULT_ENDPOINTS if endpoints is None else endpoints,
            timeout=timeout,
            logger=logger,
        )
        return await service.query()
