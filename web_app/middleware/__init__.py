"""Middleware for URL shortener web app."""

from .headers import ForwardedHeadersMiddleware
from .logging import LoggingMiddleware
from .metrics import MetricsMiddleware
from .rate_limit import client_key, setup_rate_limiting

__all__ = [
    "ForwardedHeadersMiddleware",
    "LoggingMiddleware",
    "MetricsMiddleware",
    "client_key",
    "setup_rate_limiting",
]
