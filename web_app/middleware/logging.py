"""Access log middleware."""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..dependencies import client_address


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request: client, method, path, status and latency.

    Server errors are logged at WARNING so they stand out from normal traffic.
    """

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("shortlink.web")

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"{client_address(request)} {request.method} {request.url.path} "
            f"{response.status_code} {elapsed_ms:.1f}ms",
        )
        return response
