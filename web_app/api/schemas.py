"""Pydantic schemas for API requests and responses.

Payload keys are camelCase on the wire; models are built by field name.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(CamelModel):
    """Request to shorten a URL."""

    original_url: Optional[str] = Field(None, description="The URL to shorten (http or https)")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"originalUrl": "https://example.com/very/long/path/to/resource"},
            ]
        },
    )


class ShortURLData(CamelModel):
    original_url: str
    short_code: str
    short_url: str
    clicks: int
    created_at: datetime


class ShortenResponse(CamelModel):
    """Response after shortening a URL."""

    success: bool = True
    data: ShortURLData


class AnalyticsData(CamelModel):
    original_url: str
    short_code: str
    clicks: int
    created_at: datetime
    last_accessed: Optional[datetime] = None


class AnalyticsResponse(CamelModel):
    success: bool = True
    data: AnalyticsData


class AdminURLItem(CamelModel):
    id: int
    original_url: str
    short_code: str
    short_url: str
    clicks: int
    created_at: datetime
    last_accessed: Optional[datetime] = None
    created_by: str
    is_active: bool


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_urls: int
    has_next: bool
    has_prev: bool


class URLTotals(CamelModel):
    total_urls: int
    total_clicks: int


class AdminURLListData(CamelModel):
    urls: List[AdminURLItem]
    pagination: Pagination
    stats: URLTotals


class AdminURLListResponse(CamelModel):
    success: bool = True
    data: AdminURLListData


class TopURL(CamelModel):
    short_code: str
    original_url: str
    clicks: int


class RecentURL(CamelModel):
    short_code: str
    original_url: str
    created_at: datetime


class SummaryData(CamelModel):
    total_urls: int
    total_clicks: int
    urls_today: int
    top_urls: List[TopURL]
    recent_urls: List[RecentURL]


class SummaryResponse(CamelModel):
    success: bool = True
    data: SummaryData


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class HealthResponse(CamelModel):
    """Health check response."""

    success: bool = True
    message: str = Field(..., description="Human readable status")
    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(CamelModel):
    """Error response."""

    success: bool = False
    error: str = Field(..., description="Error message")
