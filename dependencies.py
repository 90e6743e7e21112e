"""
dependencies.py

Responsibility: Declares all FastAPI Depends() provider functions for the
services used by the route handlers.
Does NOT: contain business logic, HTTP handlers, or scheduler wiring.
"""

from __future__ import annotations

from fastapi import Request

from services.ip_cache import IpCache
from services.ip_service import IpService

# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------


def get_ip_service(request: Request) -> IpService:
    """
    Provides the IpService built during the lifespan from Settings.

    Args:
        request: The current FastAPI Request (injected automatically).

    Returns:
        The application-level IpService.
    """
    return request.app.state.ip_service


def get_ip_cache(request: Request) -> IpCache:
    """
    Provides the in-memory IpCache filled by the refresh job.

    Args:
        request: The current FastAPI Request (injected automatically).

    Returns:
        The application-level IpCache.
    """
    return request.app.state.ip_cache
