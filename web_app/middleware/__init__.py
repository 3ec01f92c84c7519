"""Middleware for the shortlink web app."""

from .headers import SecurityHeadersMiddleware
from .logging import LoggingMiddleware
from .rate_limit import RateLimitMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
    "LoggingMiddleware",
    "RateLimitMiddleware",
]
