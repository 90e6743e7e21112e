"""
services/ip_parser.py

Responsibility: Extracts a canonical IP address string from the plain-text
body returned by an IP echo service.
Does NOT: make HTTP calls or know which endpoint produced the body.
"""

from __future__ import annotations

import ipaddress

from exceptions import NoAddressFoundError

_IP_PREFIX = "ip="


def _canonical(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> str:
    # ::ffff:a.b.c.d is reported as the plain IPv4 address.
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return str(address.ipv4_mapped)
    return str(address)


def parse_ip(raw: str) -> str:
    """
    Returns the first valid IP address found in an echo-service body.

    Two body shapes are understood:
        1. a bare address, e.g. "172.201.20.34"
        2. one or more lines where one of them is "ip=<address>",
           e.g. the key/value trace served by Cloudflare

    Matching is case-insensitive. Every line is validated, including the
    only line of a single-line body.

    Args:
        raw: The decoded response body.

    Returns:
        The address in canonical form: dotted decimal for IPv4, compressed
        lowercase for IPv6.

    Raises:
        NoAddressFoundError: If no line holds a valid address.
    """
    for line in raw.lower().split("\n"):
        candidate = line.strip()
        if candidate.startswith(_IP_PREFIX):
            candidate = candidate[len(_IP_PREFIX):]
        # NOTE: Scoped addresses (fe80::1%eth0) never come back from echo
        # services and have no single canonical spelling.
        if not candidate or "%" in candidate:
            continue
        try:
            return _canonical(ipaddress.ip_address(candidate))
        except ValueError:
            continue

    raise NoAddressFoundError()
