"""Header parsing utilities for URL shortener."""

from typing import Dict, Iterable, Mapping, Optional


FORWARDED_HEADERS = {
    "forwarded_proto": "x-forwarded-proto",
    "forwarded_host": "x-forwarded-host",
    "forwarded_for": "x-forwarded-for",
    "real_ip": "x-real-ip",
}


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Pick the proxy headers out of a request, matching names case-insensitively.

    Missing headers map to None.
    """
    lowered = {name.lower(): value for name, value in headers.items()}
    return {key: lowered.get(header) for key, header in FORWARDED_HEADERS.items()}


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build base URL from headers or fallback.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Args:
        headers: Request headers
        fallback_base_url: Fallback base URL from configuration
        request_scheme: Request scheme (http/https)
        request_host: Request host

    Returns:
        Base URL (e.g., https://example.com)
    """
    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_proto"] and forwarded["forwarded_host"]:
        return f"{forwarded['forwarded_proto']}://{forwarded['forwarded_host']}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def get_client_ip(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
    trusted_proxies: Iterable[str] = (),
) -> str:
    """Best guess at the originating client address.

    Forwarded headers are only believed when the socket peer is one of
    ``trusted_proxies``. X-Forwarded-For is read right to left, skipping
    trusted hops, then X-Real-IP. Otherwise the socket peer is the client.
    """
    trusted = set(trusted_proxies)
    if not peer_host or peer_host not in trusted:
        return peer_host or "unknown"

    forwarded = extract_forwarded_headers(headers)

    if forwarded["forwarded_for"]:
        hops = [hop.strip() for hop in forwarded["forwarded_for"].split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in trusted:
                return hop

    if forwarded["real_ip"]:
        return forwarded["real_ip"].strip()

    return peer_host
