"""Prometheus metrics for the URL shortener.

Each ShortenerMetrics owns its CollectorRegistry, so several applications
(or tests) in one process never share counters.
"""

from typing import Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class ShortenerMetrics:
    """Counters for shortening, resolution, store access and HTTP traffic."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        # Business metrics
        self.shorten_attempts = Counter(
            "shortener_shorten_attempts",
            "Total number of shorten requests",
            registry=self.registry,
        )
        self.shorten_successes = Counter(
            "shortener_shorten_successes",
            "Total number of URLs shortened",
            registry=self.registry,
        )
        self.resolve_attempts = Counter(
            "shortener_resolve_attempts",
            "Total number of short code resolutions attempted",
            registry=self.registry,
        )
        self.resolve_not_found = Counter(
            "shortener_resolve_not_found",
            "Total number of resolutions for unknown short codes",
            registry=self.registry,
        )
        self.hit_increment_failures = Counter(
            "shortener_hit_increment_failures",
            "Total number of hit count updates that failed",
            registry=self.registry,
        )
        self.internal_errors = Counter(
            "shortener_internal_errors",
            "Total number of internal server errors",
            registry=self.registry,
        )
        self.store_size = Gauge(
            "shortener_store_size",
            "Number of short links in the mapping store",
            registry=self.registry,
        )

        # HTTP metrics
        self.http_requests = Counter(
            "http_requests",
            "Total number of HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry,
        )
        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "endpoint"],
            registry=self.registry,
        )

        # Store metrics
        self.store_operations = Counter(
            "db_operations",
            "Total number of mapping store operations",
            ["operation", "status"],
            registry=self.registry,
        )
        self.store_operation_duration = Histogram(
            "db_operation_duration_seconds",
            "Duration of mapping store operations in seconds",
            ["operation"],
            registry=self.registry,
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float) -> None:
        self.http_requests.labels(method, endpoint, str(status_code)).inc()
        self.http_request_duration.labels(method, endpoint).observe(duration)

    def record_store_operation(self, operation: str, status: str, duration: float) -> None:
        self.store_operations.labels(operation, status).inc()
        self.store_operation_duration.labels(operation).observe(duration)

    def render(self, store_size: Optional[int] = None) -> Tuple[bytes, str]:
        """Render the text exposition, refreshing the store size gauge first.

        Returns:
            Tuple of (body, content_type)
        """
        if store_size is not None:
            self.store_size.set(store_size)
        return generate_latest(self.registry), self.content_type
