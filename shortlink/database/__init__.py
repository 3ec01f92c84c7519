"""Record store layer for the shortlink service."""

import logging
from typing import Optional

from .base import URLShortenerDBBase, SORT_COLUMNS
from .memory import InMemoryURLStore
from .postgres import URLShortenerPostgres
from .models import URLRecord

__all__ = [
    "URLShortenerDBBase",
    "InMemoryURLStore",
    "URLShortenerPostgres",
    "URLRecord",
    "SORT_COLUMNS",
    "create_store",
]


def create_store(
    database_url: str,
    pool_max_size: int = 10,
    timeout_seconds: float = 10.0,
    logger: Optional[logging.Logger] = None,
) -> URLShortenerDBBase:
    """Build the store named by a connection URL (memory:// or postgresql://)."""
    if database_url.startswith("memory://"):
        return InMemoryURLStore(database_url, logger=logger)
    return URLShortenerPostgres(
        db_config=database_url,
        pool_max_size=pool_max_size,
        timeout_seconds=timeout_seconds,
        logger=logger,
    )
