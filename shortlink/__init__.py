"""Core business logic for the shortlink service."""

from .shortcode import ShortCodeGenerator
from .service import URLShortenerService

__all__ = ["ShortCodeGenerator", "URLShortenerService"]
