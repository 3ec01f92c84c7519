"""JSON API routers."""

from fastapi import APIRouter

from .routes import router as public_router
from .admin_routes import router as admin_router

api_router = APIRouter()
api_router.include_router(public_router)
api_router.include_router(admin_router, prefix="/admin")

__all__ = ["api_router"]
