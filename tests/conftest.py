"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlinks.common.logging_config import setup_logging
from shortlinks.metrics import ShortenerMetrics
from shortlinks.resolver import Resolver
from shortlinks.service import ShorteningService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store import InMemoryStore, SQLiteStore
from web_app import create_app


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
async def memory_store(logger) -> AsyncGenerator[InMemoryStore, None]:
    """Create in-memory store instance."""
    store = InMemoryStore(logger=logger)

    yield store

    await store.close()


@pytest.fixture
async def sqlite_store(tmp_path, logger) -> AsyncGenerator[SQLiteStore, None]:
    """Create SQLite store in a temporary directory."""
    store = SQLiteStore(f"sqlite:///{tmp_path / 'links.db'}", logger=logger)

    yield store

    await store.close()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path, logger):
    """Every local store implementation, for contract tests."""
    if request.param == "memory":
        store = InMemoryStore(logger=logger)
    else:
        store = SQLiteStore(f"sqlite:///{tmp_path / 'links.db'}", logger=logger)

    yield store

    await store.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(length=6)


@pytest.fixture
def metrics():
    """Metrics with a private registry."""
    return ShortenerMetrics()


@pytest.fixture
def service(memory_store, short_code_generator, metrics, logger) -> ShorteningService:
    """Create service instance."""
    return ShorteningService(
        store=memory_store,
        short_code_generator=short_code_generator,
        base_url="http://testserver",
        metrics=metrics,
        logger=logger,
    )


@pytest.fixture
def resolver(memory_store, metrics, logger) -> Resolver:
    """Create resolver instance without a cache."""
    return Resolver(store=memory_store, metrics=metrics, logger=logger)


@pytest.fixture
def config():
    """Test configuration."""
    return Config(store_url="memory://", base_url="http://testserver")


@pytest.fixture
def app(memory_store, service, resolver, metrics, config):
    """Create test FastAPI app."""
    return create_app(
        store=memory_store,
        service=service,
        resolver=resolver,
        metrics=metrics,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
