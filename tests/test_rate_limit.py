"""Tests for per-client rate limiting."""

import pytest
from httpx import ASGITransport, AsyncClient
from slowapi import Limiter

from config import Config
from web_app import create_app


def build_limited_app(memory_store, service, resolver, metrics, **overrides):
    config = Config(store_url="memory://", rate_limit_per_minute=2, **overrides)
    return create_app(
        store=memory_store,
        service=service,
        resolver=resolver,
        metrics=metrics,
        config=config,
    )


@pytest.fixture
async def limited_client(memory_store, service, resolver, metrics):
    app = build_limited_app(memory_store, service, resolver, metrics)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def proxied_client(memory_store, service, resolver, metrics):
    """Client whose socket peer (127.0.0.1) is a trusted proxy."""
    app = build_limited_app(memory_store, service, resolver, metrics, trusted_proxies=["127.0.0.1"])
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
class TestRateLimitMiddleware:
    async def test_limiter_installed_only_when_enabled(self, app, memory_store, service, resolver, metrics):
        limited = build_limited_app(memory_store, service, resolver, metrics)

        assert isinstance(limited.state.limiter, Limiter)
        assert getattr(app.state, "limiter", None) is None

    async def test_excess_requests_rejected(self, limited_client):
        responses = [
            await limited_client.post("/shorten", json={"url": "https://example.com"}) for _ in range(3)
        ]

        assert [r.status_code for r in responses] == [200, 200, 429]
        assert responses[2].json() == {"error": "rate limit exceeded"}

    async def test_budget_shared_across_routes(self, limited_client):
        await limited_client.post("/shorten", json={"url": "https://example.com"})
        await limited_client.get("/nope00")

        assert (await limited_client.get("/api/links")).status_code == 429

    async def test_health_and_metrics_exempt(self, limited_client):
        for _ in range(5):
            assert (await limited_client.get("/health")).status_code == 200
            assert (await limited_client.get("/metrics")).status_code == 200

    async def test_spoofed_forwarded_for_does_not_bypass_limit(self, limited_client):
        """Without trusted proxies the socket peer is the key, whatever the headers say."""
        responses = [
            await limited_client.get("/nope00", headers={"X-Forwarded-For": f"203.0.113.{i}"}) for i in range(4)
        ]

        assert [r.status_code for r in responses] == [404, 404, 429, 429]

    async def test_trusted_proxy_keys_by_forwarded_client(self, proxied_client):
        for _ in range(2):
            await proxied_client.get("/nope00", headers={"X-Forwarded-For": "203.0.113.1"})

        blocked = await proxied_client.get("/nope00", headers={"X-Forwarded-For": "203.0.113.1"})
        other = await proxied_client.get("/nope00", headers={"X-Forwarded-For": "203.0.113.2"})

        assert blocked.status_code == 429
        assert other.status_code == 404

    async def test_disabled_by_default(self, client):
        for _ in range(20):
            assert (await client.get("/nope00")).status_code == 404
