"""Admin API routes, gated by the shared admin secret."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from .schemas import (
    AdminURLItem,
    AdminURLListData,
    AdminURLListResponse,
    ErrorResponse,
    MessageResponse,
    Pagination,
    RecentURL,
    SummaryData,
    SummaryResponse,
    TopURL,
    URLTotals,
)
from ..dependencies import require_admin_key, short_url_for
from shortlink.service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(
    dependencies=[Depends(require_admin_key)],
    responses={401: {"model": ErrorResponse, "description": "Missing or wrong admin key"}},
)


@router.get(
    "/urls",
    response_model=AdminURLListResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid paging or sort parameters"}},
    summary="List short URLs",
)
async def list_urls(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
):
    """Paginated list of active short URLs with totals."""
    service = request.app.state.service

    try:
        result = await service.list_urls(
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    urls = [
        AdminURLItem(
            id=record.id,
            original_url=record.original_url,
            short_code=record.short_code,
            short_url=short_url_for(request, record.short_code),
            clicks=record.clicks,
            created_at=record.created_at,
            last_accessed=record.last_accessed,
            created_by=record.created_by,
            is_active=record.is_active,
        )
        for record in result["urls"]
    ]

    return AdminURLListResponse(
        data=AdminURLListData(
            urls=urls,
            pagination=Pagination(
                current_page=result["page"],
                total_pages=result["total_pages"],
                total_urls=result["total_urls"],
                has_next=result["page"] < result["total_pages"],
                has_prev=result["page"] > 1,
            ),
            stats=URLTotals(
                total_urls=result["total_urls"],
                total_clicks=result["total_clicks"],
            ),
        )
    )


@router.delete(
    "/urls/{record_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Record not found"}},
    summary="Soft-delete a short URL",
)
async def delete_url(request: Request, record_id: int):
    """Deactivate a record. Its short code stays reserved."""
    service = request.app.state.service

    await service.deactivate(record_id)

    return MessageResponse(message="URL deleted successfully")


@router.get(
    "/stats",
    response_model=SummaryResponse,
    summary="Get statistics",
    description="Totals, today's creations, top and most recent short URLs.",
)
async def get_statistics(request: Request):
    service = request.app.state.service

    summary = await service.get_summary()

    return SummaryResponse(
        data=SummaryData(
            total_urls=summary["total_urls"],
            total_clicks=summary["total_clicks"],
            urls_today=summary["urls_today"],
            top_urls=[
                TopURL(short_code=r.short_code, original_url=r.original_url, clicks=r.clicks)
                for r in summary["top_urls"]
            ],
            recent_urls=[
                RecentURL(short_code=r.short_code, original_url=r.original_url, created_at=r.created_at)
                for r in summary["recent_urls"]
            ],
        )
    )
