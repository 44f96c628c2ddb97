"""Read-only JSON API for stored links."""

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from .schemas import DetailedHealthResponse, ErrorResponse, LinkInfoResponse

router = APIRouter()


@router.get(
    "/links",
    response_model=List[LinkInfoResponse],
    summary="List recent links",
    description="Most recently created short links, newest first.",
)
async def list_links(request: Request, limit: int = Query(20, ge=1, le=100)):
    """List recently created links."""
    store = request.app.state.store

    links = await store.list_recent(limit)

    return [LinkInfoResponse(**link.to_dict()) for link in links]


@router.get(
    "/links/{code}",
    response_model=LinkInfoResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get link information",
    description="Get a short link's record including its hit count. Does not count as a hit.",
)
async def get_link_info(request: Request, code: str):
    """Get information about a short link."""
    resolver = request.app.state.resolver

    link = await resolver.info(code)

    if link is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": f"Short code '{code}' not found"},
        )

    return LinkInfoResponse(**link.to_dict())


@router.get(
    "/health",
    response_model=DetailedHealthResponse,
    summary="Detailed health check",
    description="Store and cache status.",
)
async def health_check(request: Request):
    """Health check with component breakdown."""
    store = request.app.state.store
    cache = getattr(request.app.state, "cache", None)

    store_healthy = await store.health_check()
    store_size = await store.size() if store_healthy else None

    if cache is not None and cache.enabled:
        cache_status = "healthy" if await cache.ping() else "unhealthy"
    else:
        cache_status = "disabled"

    body = DetailedHealthResponse(
        status="healthy" if store_healthy else "unhealthy",
        store="healthy" if store_healthy else "unhealthy",
        cache=cache_status,
        store_size=store_size,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_200_OK if store_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )
