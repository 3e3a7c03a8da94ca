"""
API Routes
"""
from fastapi import APIRouter

from .checkout import router as checkout_router
from .plans import router as plans_router
from .profile import router as profile_router


def create_api_router() -> APIRouter:
    """Create and configure the main API router"""
    api_router = APIRouter(prefix="/api")

    api_router.include_router(checkout_router)
    api_router.include_router(plans_router)
    api_router.include_router(profile_router)

    @api_router.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    return api_router


__all__ = ["create_api_router"]
