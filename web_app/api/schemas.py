"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request to shorten a URL.

    ``url`` is deliberately unconstrained here: emptiness and format are
    checked by the shortening service so every client sees the same messages.
    """

    url: Optional[str] = Field(None, description="The URL to shorten")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://example.com/very/long/path/to/resource"},
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "aZ3k9Q",
                    "short_url": "http://localhost:8080/aZ3k9Q",
                    "original_url": "https://example.com/very/long/path",
                    "created_at": "2024-01-01T12:00:00Z"
                }
            ]
        }
    }


class LinkInfoResponse(BaseModel):
    """Stored record of a short link."""

    code: str
    original_url: str
    created_at: datetime
    hit_count: int
    last_accessed: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Health probe response."""

    status: str = Field(..., description="healthy or unhealthy")


class DetailedHealthResponse(BaseModel):
    """Health check with component status."""

    status: str = Field(..., description="Overall status")
    store: str = Field(..., description="Mapping store status")
    cache: str = Field(..., description="Cache status (disabled when not configured)")
    store_size: Optional[int] = Field(None, description="Number of stored links")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error message")
