"""Destination checks for user-supplied remote URLs.

Only public http(s) endpoints are allowed. Hostnames are resolved and every
returned address must sit outside the private, loopback, link-local and
reserved ranges; a name that does not resolve at all is rejected too.
"""

import asyncio
from collections.abc import Awaitable, Callable
import ipaddress
import socket

from aws_lambda_powertools import Logger
import httpx

from core.models.errors import MediaServiceError
from core.utils.constants import BLOCKED_HOSTNAMES

logger = Logger(UTC=True)

Resolver = Callable[[str], Awaitable[list[str]]]

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_BLOCKED_NETWORKS: tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...] = (
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("fc00::/7"),
)


def parse_ip(value: str) -> IPAddress | None:
    try:
        return ipaddress.ip_address(value.split("%", 1)[0])
    except ValueError:
        return None


def is_disallowed_ip(address: IPAddress) -> bool:
    """Return True for addresses the service must never connect to."""
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped

    if address.is_unspecified or address.is_reserved or address.is_multicast:
        return True

    return any(
        address.version == network.version and address in network
        for network in _BLOCKED_NETWORKS
    )


async def resolve_host(hostname: str) -> list[str]:
    """Resolve A and AAAA records; an empty list means the name did not resolve."""
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError):
        return []

    return list(dict.fromkeys(str(info[4][0]) for info in infos))


def _is_blocked_hostname(hostname: str) -> bool:
    return hostname in BLOCKED_HOSTNAMES or any(
        hostname.endswith(f".{blocked}") for blocked in BLOCKED_HOSTNAMES
    )


async def validate_remote_url(
    raw_url: str | None,
    *,
    resolver: Resolver = resolve_host,
) -> str:
    """Validate a remote URL and return its normalized form.

    Raises:
        MediaServiceError: INVALID_INPUT for any rejected URL
    """
    if not raw_url:
        raise MediaServiceError.invalid_input("url is required")

    try:
        parsed = httpx.URL(raw_url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise MediaServiceError.invalid_input("url must be a valid URL") from exc

    if parsed.scheme not in ("http", "https"):
        raise MediaServiceError.invalid_input("url must use http or https")

    hostname = parsed.host.lower().rstrip(".")
    if not hostname:
        raise MediaServiceError.invalid_input("url must be a valid URL")

    if _is_blocked_hostname(hostname):
        raise MediaServiceError.invalid_input(
            "url points to a disallowed host", details={"host": hostname}
        )

    literal = parse_ip(hostname)
    if literal is not None:
        if is_disallowed_ip(literal):
            raise MediaServiceError.invalid_input(
                "url points to a private address", details={"host": hostname}
            )
        return str(parsed)

    addresses = await resolver(hostname)
    if not addresses:
        raise MediaServiceError.invalid_input(
            "url could not be resolved", details={"host": hostname}
        )

    for value in addresses:
        address = parse_ip(value)
        if address is None or is_disallowed_ip(address):
            logger.warning(
                "Rejected URL resolving to private address",
                extra={"host": hostname, "address": value},
            )
            raise MediaServiceError.invalid_input(
                "url points to a private address", details={"host": hostname}
            )

    return str(parsed)
