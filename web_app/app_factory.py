"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortlink.ratelimit import InMemoryRateLimiter, RateLimiter
from .api import api_router
from .web import web_router
from .errors import register_exception_handlers
from .middleware.headers import SecurityHeadersMiddleware
from .middleware.logging import LoggingMiddleware
from .middleware.rate_limit import RateLimitMiddleware


def create_app(
    db_instance,
    service_instance,
    config,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        db_instance: Record store instance
        service_instance: Service instance
        config: Configuration instance
        rate_limiter: Rate limiter for /api/ paths (in-memory from config if not given)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Shortlink",
        description="URL shortening service with click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    if rate_limiter is None:
        rate_limiter = InMemoryRateLimiter(
            max_requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window_seconds,
        )

    # Store instances in app state for access in routes
    app.state.db = db_instance
    app.state.service = service_instance
    app.state.config = config
    app.state.rate_limiter = rate_limiter

    register_exception_handlers(app)

    # Last added runs first
    app.add_middleware(RateLimitMiddleware, path_prefix="/api/")
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Catch-all /{short_code} must come after the API routes
    app.include_router(web_router, prefix=config.redirect_prefix, tags=["Redirect"])

    return app
