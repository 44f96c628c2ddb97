#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: requests are served concurrently by uvicorn on one event loop;
SQLite I/O runs in worker threads, PostgreSQL and Redis I/O is async.

Usage:
    python app.py

Environment variables:
    STORE_URL - memory://, sqlite:///path/to/file.db or postgresql://...
    CREATE_TABLES - Create the short_links table on startup (default true)
    REDIS_URL - Redis connection URL (optional read-through cache)
    BASE_URL - Base URL for short links
    CODE_STRATEGY - sequential (default) or random
    PORT - Port to listen on
    RATE_LIMIT_PER_MINUTE - Requests per minute per client (0 disables)
    TRUSTED_PROXIES - JSON list of proxies whose forwarded headers are believed
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlinks.common.logging_config import setup_logging
from shortlinks.metrics import ShortenerMetrics
from shortlinks.resolver import Resolver
from shortlinks.service import ShorteningService
from shortlinks.shortcode import ShortCodeGenerator
from shortlinks.store import InstrumentedStore, RedisCache, create_store
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store and services on startup, release them on shutdown."""
    config: Config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")

    metrics = app.state.metrics or ShortenerMetrics()

    logger.info(f"Opening mapping store at {config.store_url}")
    store = InstrumentedStore(
        create_store(config.store_url, create_tables=config.create_tables, logger=logger),
        metrics,
    )

    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")
        cache = None

    # Continue the counter after the links already stored
    start = await store.size()
    generator = ShortCodeGenerator(
        length=config.short_code_length,
        strategy=config.code_strategy,
        start=start,
        salt=config.code_salt,
    )
    logger.info(f"Code generator: strategy={config.code_strategy}, length={config.short_code_length}, start={start}")

    app.state.store = store
    app.state.cache = cache
    app.state.metrics = metrics
    app.state.service = ShorteningService(
        store=store,
        short_code_generator=generator,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
        max_collision_retries=config.max_collision_retries,
        max_url_length=config.max_url_length,
        blocked_hosts=config.blocked_hosts,
        metrics=metrics,
        logger=logger.getChild("service"),
    )
    app.state.resolver = Resolver(
        store=store,
        cache=cache,
        metrics=metrics,
        logger=logger.getChild("resolver"),
    )

    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down URL shortener service...")
        await store.close()
        if cache:
            await cache.close()
        logger.info("Service stopped")


def build_app(config: Config, logger) -> FastAPI:
    """Create the app with instances deferred to the lifespan handler."""
    app = create_app(
        store=None,  # Will be set in lifespan
        service=None,
        resolver=None,
        metrics=ShortenerMetrics(),
        config=config,
        lifespan=lifespan,
    )
    app.state.logger = logger
    return app


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump()}")

    app = build_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,  # LoggingMiddleware logs every request
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
