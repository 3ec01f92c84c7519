"""Abstract base class for shortlink record stores."""

from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import datetime

from .models import URLRecord


# Sortable record attributes (API field names are mapped onto these by the service)
SORT_COLUMNS = ("created_at", "clicks", "last_accessed", "short_code", "original_url")


class URLShortenerDBBase(ABC):
    """Abstract base class for shortlink record store operations.

    Implementations must enforce short code uniqueness themselves and make
    ``record_visit`` a single atomic increment-and-stamp.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Store connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def create_url(
        self,
        short_code: str,
        original_url: str,
        created_by: str,
        created_at: datetime,
    ) -> Optional[URLRecord]:
        """Insert a new active record with zero clicks.

        Args:
            short_code: The short code to use
            original_url: The original long URL
            created_by: Client identifier
            created_at: Creation timestamp (UTC)

        Returns:
            The stored record, or None if short_code is already taken
        """
        pass

    @abstractmethod
    async def get_by_short_code(self, short_code: str, active_only: bool = True) -> Optional[URLRecord]:
        """Look up a record by exact short code.

        Args:
            short_code: The short code to lookup
            active_only: Ignore soft-deleted records

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_original_url(self, original_url: str) -> Optional[URLRecord]:
        """Look up the oldest active record for an exact original URL."""
        pass

    @abstractmethod
    async def short_code_exists(self, short_code: str) -> bool:
        """Check if a short code is taken by any record, active or not."""
        pass

    @abstractmethod
    async def record_visit(self, short_code: str, accessed_at: datetime) -> Optional[URLRecord]:
        """Atomically increment clicks and stamp last_accessed on an active record.

        Args:
            short_code: The short code being visited
            accessed_at: Visit timestamp (UTC)

        Returns:
            The updated record, or None if no active record matches
        """
        pass

    @abstractmethod
    async def deactivate(self, record_id: int) -> bool:
        """Soft-delete a record by id.

        Returns:
            True if a record with that id exists (active or not), False otherwise
        """
        pass

    @abstractmethod
    async def list_urls(
        self,
        offset: int,
        limit: int,
        sort_by: str = "created_at",
        descending: bool = True,
    ) -> List[URLRecord]:
        """List active records.

        Nulls sort last in both directions and ties are broken by id.

        Args:
            offset: Number of records to skip
            limit: Maximum number of records to return
            sort_by: One of SORT_COLUMNS
            descending: Sort direction
        """
        pass

    @abstractmethod
    async def count_urls(self, created_since: Optional[datetime] = None) -> int:
        """Count active records, optionally only those created at or after a time."""
        pass

    @abstractmethod
    async def total_clicks(self) -> int:
        """Sum of clicks across active records."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close store connections."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass
