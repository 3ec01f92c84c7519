"""Data models for the shortlink service."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class URLRecord:
    """Represents a short link record in the store."""

    id: int
    short_code: str
    original_url: str
    created_at: datetime
    clicks: int = 0
    last_accessed: Optional[datetime] = None
    created_by: str = "anonymous"
    is_active: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "clicks": self.clicks,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
            "created_by": self.created_by,
            "is_active": self.is_active,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "URLRecord":
        """Create from a database row or mapping."""
        return cls(
            id=row["id"],
            short_code=row["short_code"],
            original_url=row["original_url"],
            created_at=row["created_at"],
            clicks=row["clicks"],
            last_accessed=row["last_accessed"],
            created_by=row["created_by"],
            is_active=row["is_active"],
        )
