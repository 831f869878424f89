"""
API v1 Router

Subscription endpoints are mounted under /subscriptions.
"""

from fastapi import APIRouter
from . import subscriptions

router = APIRouter()

router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/subscriptions/c/{channelId}",
            "/subscriptions/c/{channelId}/status",
            "/subscriptions/subscribers",
            "/subscriptions/subscribed",
            "/subscriptions/subscribed/search",
        ],
    }
