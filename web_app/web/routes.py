"""Short link redirect route."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL.

    The visit is counted before responding; unknown and soft-deleted codes
    raise NotFoundError and are rendered as 404 by the error handlers.
    """
    service = request.app.state.service

    record = await service.resolve(short_code)

    return RedirectResponse(url=record.original_url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
