"""Guards for user-submitted article URLs (SSRF protection)."""

import ipaddress
import logging
import socket
from typing import Set
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def is_http_url(url: str) -> bool:
    """Syntactic check: absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ALLOWED_SCHEMES and bool(parsed.hostname)


def _is_internal(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    # ::ffff:10.0.0.1 must be judged as 10.0.0.1
    mapped = getattr(ip, "ipv4_mapped", None)
    if mapped is not None:
        ip = mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def resolve_host(hostname: str) -> Set[str]:
    """All addresses a hostname resolves to."""
    try:
        return {info[4][0] for info in socket.getaddrinfo(hostname, None)}
    except socket.gaierror:
        raise ValueError(f"Cannot resolve host: {hostname}") from None


def validate_url(url: str) -> None:
    """
    Reject URLs that are not public http(s) addresses.

    Every resolved address must be public; one internal address is
    enough to refuse the URL.

    Raises:
        ValueError: bad format, unresolvable host or internal address
    """
    if not is_http_url(url):
        raise ValueError("Invalid URL format")

    hostname = urlparse(url).hostname
    for address in resolve_host(hostname):
        # Drop an IPv6 zone suffix (fe80::1%eth0)
        ip = ipaddress.ip_address(address.split("%", 1)[0])
        if _is_internal(ip):
            logger.warning(f"Blocked article URL {url}: {hostname} resolves to {ip}")
            raise ValueError("URL points to an internal address")
