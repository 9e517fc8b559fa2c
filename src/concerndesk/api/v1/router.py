"""Primary API router definition."""

from fastapi import APIRouter

from . import admin, quota, support_requests

api_router = APIRouter()

api_router.include_router(quota.router)
api_router.include_router(support_requests.router)
api_router.include_router(admin.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
