"""
routes/api_routes.py

Responsibility: HTTP endpoints serving the host's public IP from the
in-memory cache, plus a manual refresh action.
Does NOT: race endpoints itself or schedule refreshes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from dependencies import get_ip_cache, get_ip_service
from exceptions import AllEndpointsFailedError
from services.ip_cache import IpCache
from services.ip_service import IpService

logger = logging.getLogger(__name__)

router = APIRouter()

_NOT_AVAILABLE = "IP not available yet"


@router.get("/ip", response_class=PlainTextResponse)
async def get_ip(ip_cache: IpCache = Depends(get_ip_cache)) -> PlainTextResponse:
    """
    Returns the last known public IP as plain text.

    Args:
        ip_cache: Holds the result of the latest successful refresh.

    Returns:
        "Current IP: <ip>" with HTTP 200, or HTTP 503 before the first
        successful refresh.
    """
    if ip_cache.is_empty():
        return PlainTextResponse(_NOT_AVAILABLE, status_code=503)
    return PlainTextResponse(f"Current IP: {ip_cache.ip}\n")


@router.get("/ip/json")
async def get_ip_json(ip_cache: IpCache = Depends(get_ip_cache)) -> JSONResponse:
    """
    Returns the last known public IP, its source, and the fetch time as JSON.

    Args:
        ip_cache: Holds the result of the latest successful refresh.

    Returns:
        A JSONResponse; HTTP 503 with a "detail" message while empty.
    """
    if ip_cache.is_empty():
        return JSONResponse({"detail": _NOT_AVAILABLE}, status_code=503)
    return JSONResponse(
        {
            "ip": ip_cache.ip,
            "source": ip_cache.source,
            "last_fetch": ip_cache.last_fetch.isoformat() if ip_cache.last_fetch else None,
        }
    )


@router.post("/ip/refresh")
async def refresh_ip(
    ip_service: IpService = Depends(get_ip_service),
    ip_cache: IpCache = Depends(get_ip_cache),
) -> JSONResponse:
    """
    Runs a query immediately and stores the result in the cache.

    Args:
        ip_service: Races the configured endpoints.
        ip_cache: Receives the fresh result.

    Returns:
        The new IP and its source, or HTTP 503 if every endpoint failed.
        The cached value is left untouched on failure.
    """
    try:
        result = await ip_service.query()
    except AllEndpointsFailedError as exc:
        logger.warning("Manual refresh failed: %s", exc)
        return JSONResponse({"detail": str(exc)}, status_code=503)

    ip_cache.update(result)
    return JSONResponse({"ip": result.ip, "source": result.source})
