"""Request-scoped helpers shared by the routers."""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Query, Request, status

from shortlink.common.headers import build_base_url, resolve_client_address


def require_admin_key(
    request: Request,
    x_admin_key: Optional[str] = Header(None),
    admin_key: Optional[str] = Query(None, alias="adminKey"),
) -> None:
    """Reject the request unless it carries the configured admin secret."""
    expected = request.app.state.config.admin_key
    supplied = x_admin_key or admin_key

    if not expected or not supplied or not hmac.compare_digest(
        supplied.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized. Admin access required.",
        )


def client_address(request: Request) -> str:
    """Identify the caller for created_by and rate limiting."""
    config = request.app.state.config
    return resolve_client_address(
        headers=dict(request.headers),
        peer_host=request.client.host if request.client else None,
        trust_forwarded_for=config.trust_forwarded_for,
    )


def short_url_for(request: Request, short_code: str) -> str:
    """Build the public short URL for a code."""
    config = request.app.state.config

    if not config.use_request_host:
        return config.short_url(short_code)

    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    return config.short_url(short_code, base_url=base_url)
