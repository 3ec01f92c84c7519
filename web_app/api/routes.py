"""Public API routes implementation."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from .schemas import (
    ShortenRequest,
    ShortenResponse,
    ShortURLData,
    AnalyticsData,
    AnalyticsResponse,
    HealthResponse,
    ErrorResponse,
)
from ..dependencies import client_address, short_url_for

router = APIRouter()


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": ShortenResponse, "description": "URL was already shortened"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "No short code available, retry"},
    },
    summary="Create short URL",
    description="Shorten a URL. Submitting a URL that is already shortened returns the existing code.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL, or return the existing one."""
    service = request.app.state.service

    record, created = await service.shorten(
        original_url=body.original_url,
        created_by=client_address(request),
    )

    response = ShortenResponse(
        data=ShortURLData(
            original_url=record.original_url,
            short_code=record.short_code,
            short_url=short_url_for(request, record.short_code),
            clicks=record.clicks,
            created_at=record.created_at,
        )
    )

    if created:
        return response
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=response.model_dump(mode="json", by_alias=True),
    )


@router.get(
    "/analytics/{short_code}",
    response_model=AnalyticsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Short code not found"},
    },
    summary="Get short URL analytics",
    description="Click count and access times for an active short code.",
)
async def get_analytics(request: Request, short_code: str):
    service = request.app.state.service

    record = await service.get_analytics(short_code)

    return AnalyticsResponse(
        data=AnalyticsData(
            original_url=record.original_url,
            short_code=record.short_code,
            clicks=record.clicks,
            created_at=record.created_at,
            last_accessed=record.last_accessed,
        )
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness probe; also reports whether the store is reachable.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        message="Server is running",
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
