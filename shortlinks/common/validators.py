"""Validation utilities for URL shortener."""

from typing import Iterable, Tuple
from urllib.parse import urlparse

INVALID_URL_MESSAGE = "please provide a valid URL"


def is_valid_url(
    url: str,
    max_length: int = 2048,
    blocked_hosts: Iterable[str] = (),
) -> Tuple[bool, str]:
    """Validate a URL.

    Accepts absolute http/https URLs with a host. The URL is not rewritten:
    a missing scheme is an error, not something to guess.

    Args:
        url: The URL to validate
        max_length: Longest accepted URL
        blocked_hosts: Hostnames that may not be shortened

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str) or not url.strip():
        return False, "URL is required"

    if len(url) > max_length:
        return False, f"{INVALID_URL_MESSAGE} (max {max_length} characters)"

    if any(c.isspace() for c in url):
        return False, INVALID_URL_MESSAGE

    try:
        result = urlparse(url)
        # Out-of-range or non-numeric ports only surface on access
        result.port
    except ValueError:
        return False, INVALID_URL_MESSAGE

    if result.scheme not in ("http", "https"):
        return False, f"{INVALID_URL_MESSAGE} starting with http:// or https://"

    if not result.hostname:
        return False, INVALID_URL_MESSAGE

    blocked = {host.lower() for host in blocked_hosts}
    if result.hostname.lower() in blocked:
        return False, f"{INVALID_URL_MESSAGE}: host '{result.hostname}' is not allowed"

    return True, ""
