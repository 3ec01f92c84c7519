"""Common utilities for the shortlink service."""

from .validators import is_valid_url, is_blocked_host
from .headers import extract_forwarded_headers, build_base_url, resolve_client_address
from .logging_config import setup_logging

__all__ = [
    "is_valid_url",
    "is_blocked_host",
    "extract_forwarded_headers",
    "build_base_url",
    "resolve_client_address",
    "setup_logging",
]
