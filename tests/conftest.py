"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock or httpx.MockTransport, so no real network
calls are made in any test.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Shared httpx.AsyncClient fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client():
    """
    Yields a real httpx.AsyncClient instance for use in tests.

    Pair with the mock_http fixture so all requests are intercepted by respx.
    The client is closed after each test.
    """
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Scripted echo services for latency and cancellation scenarios
# ---------------------------------------------------------------------------


class EchoServices:
    """
    httpx.MockTransport handler answering each host with a scripted reply.

    A reply is either a body (200 OK), an exception to raise, or a
    (delay_seconds, body) tuple answered after sleeping. Records which hosts
    were started, completed, and cancelled.
    """

    def __init__(self, replies: dict[str, object]) -> None:
        self.replies = replies
        self.started: list[str] = []
        self.completed: list[str] = []
        self.cancelled: list[str] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        url = f"{request.url.scheme}://{request.url.host}"
        self.started.append(url)
        reply = self.replies[url]
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, tuple):
            delay, reply = reply
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                self.cancelled.append(url)
                raise
        self.completed.append(url)
        return httpx.Response(200, text=reply)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture()
async def echo_services():
    """
    Factory fixture: echo_services({url: reply}) returns (EchoServices, client).

    Clients created through the factory are closed after the test.
    """
    clients: list[httpx.AsyncClient] = []

    def _make(replies: dict[str, object]) -> tuple[EchoServices, httpx.AsyncClient]:
        services = EchoServices(replies)
        client = httpx.AsyncClient(transport=services.transport())
        clients.append(client)
        return services, client

    yield _make

    for client in clients:
        await client.aclose()
