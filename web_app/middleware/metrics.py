"""HTTP metrics middleware."""

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


def endpoint_label(request: Request) -> str:
    """Route template for the request, e.g. "/{code}", to keep label cardinality bounded."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request count and latency per method, route and status."""

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.perf_counter()

        response = await call_next(request)

        metrics = getattr(request.app.state, "metrics", None)
        if metrics is not None:
            metrics.record_http_request(
                request.method,
                endpoint_label(request),
                response.status_code,
                time.perf_counter() - start_time,
            )

        return response
