"""Forwarded headers middleware."""

from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from shortlinks.common.headers import extract_forwarded_headers, get_client_ip


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to extract X-Forwarded-* headers and the client IP.

    The client IP comes from forwarded headers only when the socket peer
    is one of ``trusted_proxies``.
    """

    def __init__(self, app: ASGIApp, trusted_proxies: Iterable[str] = ()):
        super().__init__(app)
        self.trusted_proxies = frozenset(trusted_proxies)

    async def dispatch(self, request: Request, call_next: Callable):
        """Store forwarded headers and client IP in request state."""
        forwarded = extract_forwarded_headers(request.headers)
        request.state.forwarded_proto = forwarded["forwarded_proto"]
        request.state.forwarded_host = forwarded["forwarded_host"]
        request.state.forwarded_for = forwarded["forwarded_for"]
        request.state.client_ip = get_client_ip(
            request.headers,
            request.client.host if request.client else None,
            trusted_proxies=self.trusted_proxies,
        )

        return await call_next(request)
