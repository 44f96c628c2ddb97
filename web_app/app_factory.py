"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlinks import __version__
from shortlinks.exceptions import StoreError

from .api import api_router
from .web import web_router
from .middleware import (
    ForwardedHeadersMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    setup_rate_limiting,
)
from .web.routes import health_check, metrics_endpoint

logger = logging.getLogger("shortlinks.web")


def create_app(
    store,
    service,
    resolver,
    metrics,
    config,
    cache=None,
    lifespan=None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Instances may be None when a lifespan handler builds them at startup.

    Args:
        store: Mapping store instance
        service: Shortening service instance
        resolver: Resolver instance
        metrics: Metrics instance
        config: Configuration instance
        cache: Optional Redis cache instance
        lifespan: Optional lifespan context manager

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="Maps long URLs to short codes and redirects on access",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.store = store
    app.state.cache = cache
    app.state.service = service
    app.state.resolver = resolver
    app.state.metrics = metrics
    app.state.config = config

    # Middleware added last runs first: forwarded headers -> logging -> metrics -> rate limit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    if config.rate_limit_per_minute > 0:
        setup_rate_limiting(
            app,
            config.rate_limit_per_minute,
            exempt_endpoints=(health_check, metrics_endpoint),
        )
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ForwardedHeadersMiddleware, trusted_proxies=config.trusted_proxies)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        in_body = any(error.get("loc", ("",))[0] == "body" for error in exc.errors())
        message = "invalid request body" if in_body else "invalid request parameters"
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
        if request.app.state.metrics is not None:
            request.app.state.metrics.internal_errors.inc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal error, please try again"},
        )

    # web_router ends with the /{code} catch-all, so it goes last
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
