from fastapi import APIRouter

from credit_auction.interfaces.http.routers import admin, bids, credits


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(bids.router, prefix="/enquiries", tags=["bids"])
    router.include_router(credits.router, prefix="/credits", tags=["credits"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
