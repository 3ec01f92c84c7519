"""Business logic service for the shortlink service."""

import logging
import math
from typing import Optional, Dict, Any, Iterable, Tuple
from datetime import datetime, timezone

from .shortcode import ShortCodeGenerator
from .database.base import URLShortenerDBBase
from .database.models import URLRecord
from .common.validators import is_valid_url, DEFAULT_BLOCKED_HOSTS
from .errors import InvalidURLError, NotFoundError, ShortCodeExhaustedError


# API sort field -> record attribute
SORT_FIELDS = {
    "createdAt": "created_at",
    "date": "created_at",
    "clicks": "clicks",
    "lastAccessed": "last_accessed",
    "shortCode": "short_code",
    "originalUrl": "original_url",
}

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
SUMMARY_TOP_N = 5

# Ids and offsets are BIGINT in the store
MAX_STORE_INT = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class URLShortenerService:
    """Service layer for URL shortening, redirects and reporting."""

    def __init__(
        self,
        db: URLShortenerDBBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        blocked_hosts: Iterable[str] = DEFAULT_BLOCKED_HOSTS,
        clock=utcnow,
    ):
        """Initialize shortlink service.

        Args:
            db: Record store instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_collision_retries: Allocation attempts per code length
            blocked_hosts: Hostnames that may not be shortened
            clock: Callable returning the current UTC time
        """
        self.db = db
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.blocked_hosts = tuple(blocked_hosts)
        self.clock = clock

    async def shorten(
        self,
        original_url: Optional[str],
        created_by: str = "anonymous",
    ) -> Tuple[URLRecord, bool]:
        """Return the short link for a URL, creating it on first submission.

        Repeated submissions of the same URL return the existing active
        record unchanged.

        Args:
            original_url: The original long URL
            created_by: Client identifier stored on new records

        Returns:
            Tuple of (record, created)

        Raises:
            InvalidURLError: If validation fails
            ShortCodeExhaustedError: If no free code could be allocated
            StoreError: If the store fails
        """
        original_url = original_url.strip() if isinstance(original_url, str) else original_url

        is_valid, error = is_valid_url(original_url, self.blocked_hosts)
        if not is_valid:
            raise InvalidURLError(error)

        existing = await self.db.get_by_original_url(original_url)
        if existing:
            self.logger.debug(f"Reusing short URL: {existing.short_code} -> {original_url}")
            return existing, False

        record = await self._create_with_unique_code(original_url, created_by or "anonymous")
        self.logger.info(f"Created short URL: {record.short_code} -> {original_url}")
        return record, True

    async def resolve(self, short_code: str) -> URLRecord:
        """Record a visit to a short code and return the updated record.

        Raises:
            NotFoundError: If no active record has this code
        """
        record = None
        if ShortCodeGenerator.is_valid_format(short_code):
            record = await self.db.record_visit(short_code, self.clock())
        if record is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise NotFoundError("Short URL not found")

        self.logger.debug(f"Redirecting {short_code} -> {record.original_url} (clicks={record.clicks})")
        return record

    async def get_analytics(self, short_code: str) -> URLRecord:
        """Get the active record for a short code without recording a visit.

        Raises:
            NotFoundError: If no active record has this code
        """
        if not ShortCodeGenerator.is_valid_format(short_code):
            raise NotFoundError("Short URL not found")
        record = await self.db.get_by_short_code(short_code, active_only=True)
        if record is None:
            raise NotFoundError("Short URL not found")
        return record

    async def list_urls(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """List active records one page at a time.

        Args:
            page: 1-based page number
            limit: Page size (1..MAX_PAGE_SIZE)
            sort_by: One of SORT_FIELDS
            sort_order: "asc" for ascending, anything else descending

        Returns:
            Dictionary with urls, page, limit, total_pages, total_urls, total_clicks

        Raises:
            ValueError: If paging or sort parameters are invalid
        """
        if page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if (page - 1) * limit > MAX_STORE_INT:
            raise ValueError("page is out of range")
        column = SORT_FIELDS.get(sort_by)
        if column is None:
            raise ValueError(f"sortBy must be one of: {', '.join(SORT_FIELDS)}")

        urls = await self.db.list_urls(
            offset=(page - 1) * limit,
            limit=limit,
            sort_by=column,
            descending=sort_order != "asc",
        )
        total_urls = await self.db.count_urls()
        total_clicks = await self.db.total_clicks()

        return {
            "urls": urls,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total_urls / limit),
            "total_urls": total_urls,
            "total_clicks": total_clicks,
        }

    async def get_summary(self) -> Dict[str, Any]:
        """Get service-wide statistics over active records.

        "Today" starts at midnight UTC.
        """
        start_of_day = self.clock().replace(hour=0, minute=0, second=0, microsecond=0)

        return {
            "total_urls": await self.db.count_urls(),
            "total_clicks": await self.db.total_clicks(),
            "urls_today": await self.db.count_urls(created_since=start_of_day),
            "top_urls": await self.db.list_urls(0, SUMMARY_TOP_N, sort_by="clicks", descending=True),
            "recent_urls": await self.db.list_urls(0, SUMMARY_TOP_N, sort_by="created_at", descending=True),
        }

    async def deactivate(self, record_id: int) -> None:
        """Soft-delete a record; its short code stays reserved.

        Raises:
            NotFoundError: If no record has this id
        """
        if not 1 <= record_id <= MAX_STORE_INT or not await self.db.deactivate(record_id):
            raise NotFoundError("URL not found")
        self.logger.info(f"Deactivated URL record {record_id}")

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        return {
            "database": db_healthy,
            "overall": db_healthy,
        }

    async def _create_with_unique_code(self, original_url: str, created_by: str) -> URLRecord:
        """Insert a record under a freshly generated code.

        Tries ``max_collision_retries`` codes at the default length, then the
        same number one character longer. The store's uniqueness check on
        insert decides races between concurrent requests.

        Raises:
            ShortCodeExhaustedError: If every attempt collided
        """
        default_length = self.generator.default_length
        lengths = [default_length, default_length + 1]

        attempt = 0
        for length in lengths:
            for _ in range(self.max_collision_retries):
                attempt += 1
                code = self.generator.generate_random(length)

                if await self.db.short_code_exists(code):
                    self.logger.debug(f"Short code collision on attempt {attempt}: {code}")
                    continue

                record = await self.db.create_url(code, original_url, created_by, self.clock())
                if record is not None:
                    if attempt > 1:
                        self.logger.debug(f"Generated code after {attempt} attempts: {code}")
                    return record

        self.logger.error(f"Unable to allocate a short code after {attempt} attempts")
        raise ShortCodeExhaustedError("Could not allocate a short code, please retry")

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
