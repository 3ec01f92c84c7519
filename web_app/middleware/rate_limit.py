"""Request rate limiting middleware for the JSON API."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from typing import Callable

from ..dependencies import client_address


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply ``app.state.rate_limiter`` to every path under ``path_prefix``."""

    def __init__(self, app, path_prefix: str = "/api/"):
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: Callable):
        limiter = getattr(request.app.state, "rate_limiter", None)
        if limiter is None or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        result = await limiter.hit(client_address(request))
        if not result.allowed:
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Too many requests, please try again later."},
                headers=result.headers(),
            )

        response = await call_next(request)
        for name, value in result.headers().items():
            response.headers[name] = value
        return response
