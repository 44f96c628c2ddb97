"""Tests for Prometheus metrics."""

import pytest
from httpx import ASGITransport, AsyncClient

from app import build_app, lifespan
from config import Config
from shortlinks.exceptions import AlreadyExistsError, StoreError
from shortlinks.metrics import ShortenerMetrics
from shortlinks.store import InMemoryStore, InstrumentedStore


class TestShortenerMetrics:
    def test_registries_are_independent(self):
        """Two instances in one process never share counters."""
        first = ShortenerMetrics()
        second = ShortenerMetrics()

        first.shorten_attempts.inc()

        assert first.registry.get_sample_value("shortener_shorten_attempts_total") == 1
        assert second.registry.get_sample_value("shortener_shorten_attempts_total") == 0

    def test_render_sets_store_size(self):
        metrics = ShortenerMetrics()

        body, content_type = metrics.render(store_size=42)

        assert content_type.startswith("text/plain")
        assert b"shortener_store_size 42.0" in body

    def test_render_without_store_size_keeps_gauge(self):
        metrics = ShortenerMetrics()
        metrics.render(store_size=7)

        body, _ = metrics.render()

        assert b"shortener_store_size 7.0" in body

    def test_record_http_request(self):
        metrics = ShortenerMetrics()

        metrics.record_http_request("GET", "/{code}", 302, 0.004)
        metrics.record_http_request("GET", "/{code}", 302, 0.002)

        labels = {"method": "GET", "endpoint": "/{code}", "status_code": "302"}
        assert metrics.registry.get_sample_value("http_requests_total", labels) == 2
        assert metrics.registry.get_sample_value(
            "http_request_duration_seconds_count", {"method": "GET", "endpoint": "/{code}"}
        ) == 2

    def test_exposition_has_help_and_type(self):
        body, _ = ShortenerMetrics().render(store_size=0)
        text = body.decode()

        for name in (
            "shortener_shorten_attempts_total",
            "shortener_shorten_successes_total",
            "shortener_resolve_attempts_total",
            "shortener_resolve_not_found_total",
            "shortener_hit_increment_failures_total",
            "shortener_internal_errors_total",
        ):
            assert f"# HELP {name} " in text
            assert f"# TYPE {name} counter" in text
        assert "# TYPE shortener_store_size gauge" in text

    def test_record_store_operation(self):
        metrics = ShortenerMetrics()

        metrics.record_store_operation("get", "not_found", 0.001)

        assert metrics.registry.get_sample_value("db_operations_total", {"operation": "get", "status": "not_found"}) == 1
        assert metrics.registry.get_sample_value("db_operation_duration_seconds_count", {"operation": "get"}) == 1
        assert "# TYPE db_operations_total counter" in metrics.render()[0].decode()


class FailingSizeStore(InMemoryStore):
    async def size(self) -> int:
        raise StoreError("disk on fire")


@pytest.mark.asyncio
class TestInstrumentedStore:
    """Every store call is counted by operation and outcome."""

    @staticmethod
    def count(metrics, operation, status):
        return metrics.registry.get_sample_value("db_operations_total", {"operation": operation, "status": status})

    async def test_records_outcomes(self, metrics, logger):
        store = InstrumentedStore(InMemoryStore(logger=logger), metrics)

        await store.put("abc123", "https://example.com/test")
        with pytest.raises(AlreadyExistsError):
            await store.put("abc123", "https://example.com/other")
        await store.get("abc123")
        await store.get("nope00")
        assert await store.increment_hit("abc123") is True
        assert await store.increment_hit("nope00") is False
        assert await store.size() == 1

        assert self.count(metrics, "put", "success") == 1
        assert self.count(metrics, "put", "conflict") == 1
        assert self.count(metrics, "get", "success") == 1
        assert self.count(metrics, "get", "not_found") == 1
        assert self.count(metrics, "increment_hit", "success") == 1
        assert self.count(metrics, "increment_hit", "not_found") == 1
        assert self.count(metrics, "size", "success") == 1
        assert metrics.registry.get_sample_value("db_operation_duration_seconds_count", {"operation": "put"}) == 2

    async def test_records_errors(self, metrics, logger):
        store = InstrumentedStore(FailingSizeStore(logger=logger), metrics)

        with pytest.raises(StoreError):
            await store.size()
        assert await store.health_check() is False

        assert self.count(metrics, "size", "error") == 2

    async def test_served_through_metrics_endpoint(self, logger):
        app = build_app(Config(store_url="memory://"), logger)

        async with lifespan(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                created = await client.post("/shorten", json={"url": "https://example.com/metered"})
                await client.get(f"/{created.json()['code']}")
                await client.get("/nope00")

                text = (await client.get("/metrics")).text

        assert 'db_operations_total{operation="put",status="success"} 1.0' in text
        assert 'db_operations_total{operation="get",status="success"} 1.0' in text
        assert 'db_operations_total{operation="get",status="not_found"} 1.0' in text
        assert 'db_operations_total{operation="increment_hit",status="success"} 1.0' in text
        assert 'db_operation_duration_seconds_count{operation="size"}' in text
