"""Validation utilities for the shortlink service."""

import ipaddress
from urllib.parse import urlparse
from typing import Iterable, Optional, Tuple


MAX_URL_LENGTH = 2048

DEFAULT_BLOCKED_HOSTS = ("localhost", "127.0.0.1", "0.0.0.0")


def is_blocked_host(hostname: str, blocked_hosts: Iterable[str] = DEFAULT_BLOCKED_HOSTS) -> bool:
    """Check whether a hostname points back at the local machine.

    Matches a blocked name exactly or as a parent domain
    (``api.localhost``), and any loopback or unspecified IP literal.
    """
    host = hostname.lower().rstrip(".")
    for blocked in blocked_hosts:
        blocked = blocked.lower()
        if host == blocked or host.endswith("." + blocked):
            return True

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_unspecified


def is_valid_url(
    url: Optional[str],
    blocked_hosts: Iterable[str] = DEFAULT_BLOCKED_HOSTS,
) -> Tuple[bool, str]:
    """Validate a URL submitted for shortening.

    Args:
        url: The URL to validate (already trimmed)
        blocked_hosts: Hostnames that may not be shortened

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if any(c.isspace() for c in url):
        return False, "Please provide a valid URL with http:// or https://"

    try:
        result = urlparse(url)
        hostname = result.hostname
        result.port  # raises ValueError on a malformed port
    except ValueError:
        return False, "Please provide a valid URL with http:// or https://"

    # Check if scheme is http or https
    if result.scheme not in ("http", "https"):
        return False, "Please provide a valid URL with http:// or https://"

    if not hostname:
        return False, "URL must have a valid domain"

    if is_blocked_host(hostname, blocked_hosts):
        return False, "Cannot shorten local URLs"

    # Require a TLD unless the host is an IP literal
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        labels = hostname.rstrip(".").split(".")
        if len(labels) < 2 or not all(labels):
            return False, "URL must have a valid domain"

    return True, ""
