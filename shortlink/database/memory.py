"""In-process record store for development and tests."""

import itertools
import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from .base import URLShortenerDBBase, SORT_COLUMNS
from .models import URLRecord


class InMemoryURLStore(URLShortenerDBBase):
    """Record store kept in a dictionary.

    Every operation completes without awaiting, so each one is atomic with
    respect to other coroutines on the same event loop. Records do not
    survive a restart and are not shared between worker processes.
    """

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self._records: Dict[int, URLRecord] = {}
        self._by_code: Dict[str, int] = {}
        self._ids = itertools.count(1)

    async def create_url(
        self,
        short_code: str,
        original_url: str,
        created_by: str,
        created_at: datetime,
    ) -> Optional[URLRecord]:
        if short_code in self._by_code:
            self.logger.warning(f"Short code already exists: {short_code}")
            return None

        record = URLRecord(
            id=next(self._ids),
            short_code=short_code,
            original_url=original_url,
            created_at=created_at,
            created_by=created_by,
        )
        self._records[record.id] = record
        self._by_code[short_code] = record.id
        return replace(record)

    async def get_by_short_code(self, short_code: str, active_only: bool = True) -> Optional[URLRecord]:
        record_id = self._by_code.get(short_code)
        if record_id is None:
            return None
        record = self._records[record_id]
        if active_only and not record.is_active:
            return None
        return replace(record)

    async def get_by_original_url(self, original_url: str) -> Optional[URLRecord]:
        for record in self._records.values():
            if record.is_active and record.original_url == original_url:
                return replace(record)
        return None

    async def short_code_exists(self, short_code: str) -> bool:
        return short_code in self._by_code

    async def record_visit(self, short_code: str, accessed_at: datetime) -> Optional[URLRecord]:
        record_id = self._by_code.get(short_code)
        if record_id is None:
            return None
        record = self._records[record_id]
        if not record.is_active:
            return None
        record.clicks += 1
        record.last_accessed = accessed_at
        return replace(record)

    async def deactivate(self, record_id: int) -> bool:
        record = self._records.get(record_id)
        if record is None:
            return False
        record.is_active = False
        return True

    async def list_urls(
        self,
        offset: int,
        limit: int,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> List[URLRecord]:
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"Unsupported sort column: {sort_by}")

        active = sorted(
            (r for r in self._records.values() if r.is_active),
            key=lambda r: r.id,
        )
        present = [r for r in active if getattr(r, sort_by) is not None]
        missing = [r for r in active if getattr(r, sort_by) is None]
        # Stable sort keeps id order among equal values, also with reverse=True
        present.sort(key=lambda r: getattr(r, sort_by), reverse=descending)

        page = (present + missing)[offset:offset + limit]
        return [replace(r) for r in page]

    async def count_urls(self, created_since: Optional[datetime] = None) -> int:
        return sum(
            1 for r in self._records.values()
            if r.is_active and (created_since is None or r.created_at >= created_since)
        )

    async def total_clicks(self) -> int:
        return sum(r.clicks for r in self._records.values() if r.is_active)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.logger.debug(f"Closing in-memory store with {len(self._records)} records")
