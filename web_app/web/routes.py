"""Shorten, redirect and observability routes."""

import logging
import os

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from shortlinks.common.headers import build_base_url
from shortlinks.exceptions import NotFoundError, ValidationError

from ..api.schemas import ErrorResponse, HealthResponse, ShortenRequest, ShortenResponse

router = APIRouter()

logger = logging.getLogger("shortlinks.web")

template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=template_dir)

SHORTEN_FAILED_MESSAGE = "failed to shorten URL, please try again"


def _count_internal_error(request: Request) -> None:
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is not None:
        metrics.internal_errors.inc()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid URL"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service
    config = request.app.state.config

    base_url = build_base_url(
        headers=request.headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )

    try:
        result = await service.shorten(body.url, base_url=base_url)
    except ValidationError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})
    except Exception:
        logger.exception("Failed to shorten URL")
        _count_internal_error(request)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": SHORTEN_FAILED_MESSAGE},
        )

    return ShortenResponse(**result)


@router.get("/health", response_model=HealthResponse, summary="Health probe")
async def health_check(request: Request):
    """Liveness plus a store round trip, for load balancers."""
    store = request.app.state.store

    if await store.health_check():
        return {"status": "healthy"}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unhealthy"},
    )


@router.get("/metrics", include_in_schema=False)
async def metrics_endpoint(request: Request):
    """Prometheus text exposition."""
    store = request.app.state.store
    metrics = request.app.state.metrics

    try:
        store_size = await store.size()
    except Exception as e:
        # Keep serving the counters; the gauge keeps its last value.
        logger.error(f"Could not read store size for metrics: {e}")
        store_size = None

    body, content_type = metrics.render(store_size)
    return Response(content=body, media_type=content_type)


@router.get("/{code}", include_in_schema=False)
async def redirect_to_url(request: Request, code: str):
    """Redirect to the original URL."""
    resolver = request.app.state.resolver

    try:
        original_url = await resolver.resolve(code)
    except NotFoundError:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"code": code},
            status_code=status.HTTP_404_NOT_FOUND,
        )
    except Exception:
        logger.exception(f"Failed to resolve {code}")
        _count_internal_error(request)
        return templates.TemplateResponse(
            request,
            "error.html",
            {},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
