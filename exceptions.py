"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class ParseError(Exception):
    """
    Base class for failures to extract an IP address from a response body.
    """


class NoAddressFoundError(ParseError):
    """
    Raised by parse_ip when no line of the body resolves to a valid
    IPv4 or IPv6 address.
    """

    def __init__(self, message: str = "no ip address found") -> None:
        super().__init__(message)


class EndpointFetchError(Exception):
    """
    Raised inside a single race task when one endpoint cannot produce an IP.

    Covers invalid URLs, transport errors, timeouts, non-2xx responses,
    undecodable bodies and parse failures. IpService absorbs it; it never
    reaches the caller of query().
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class QueryError(Exception):
    """
    Base class for errors surfaced by IpService.query().
    """


class AllEndpointsFailedError(QueryError):
    """
    Raised by IpService.query() when every configured endpoint failed.

    Deliberately generic: per-endpoint diagnostics only go to the logger.
    """

    def __init__(self, message: str = "all requests failed") -> None:
        super().__init__(message)


class ConfigError(Exception):
    """
    Raised by load_settings() when an environment variable holds a value
    that cannot be used.
    """
