"""Per-client rate limiting built on slowapi.

Every route shares one budget per client, counted in slowapi's in-memory
storage, which expires idle clients on its own.
"""

import logging
from typing import Callable, Iterable

from fastapi import FastAPI
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger("shortlinks.web")


def client_key(request: Request) -> str:
    """Key requests by the client IP ForwardedHeadersMiddleware resolved."""
    return getattr(request.state, "client_ip", None) or get_remote_address(request)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {client_key(request)}: {request.method} {request.url.path} ({exc.detail})")
    return JSONResponse(status_code=429, content={"error": "rate limit exceeded"})


def create_limiter(requests_per_minute: int) -> Limiter:
    return Limiter(
        key_func=client_key,
        application_limits=[f"{requests_per_minute}/minute"],
        strategy="moving-window",
        storage_uri="memory://",
    )


def setup_rate_limiting(
    app: FastAPI,
    requests_per_minute: int,
    exempt_endpoints: Iterable[Callable] = (),
) -> Limiter:
    """Install a limiter on the app.

    Args:
        app: FastAPI application
        requests_per_minute: Requests allowed per client per minute
        exempt_endpoints: Route handlers that are never limited

    Returns:
        The installed Limiter
    """
    limiter = create_limiter(requests_per_minute)
    for endpoint in exempt_endpoints:
        # slowapi matches exemptions by the handler's qualified name
        limiter.exempt(endpoint)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter
