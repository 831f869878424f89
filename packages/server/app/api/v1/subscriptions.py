"""
Subscription API endpoints.

GET  /api/v1/subscriptions/c/{channelId}/status   — Is the requester subscribed?
POST /api/v1/subscriptions/c/{channelId}          — Toggle subscription
GET  /api/v1/subscriptions/subscribers            — Subscribers of a channel
GET  /api/v1/subscriptions/subscribed             — Channels a user follows
GET  /api/v1/subscriptions/subscribed/search      — Search channels a user follows
"""

from __future__ import annotations

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthenticatedUser, get_authenticated_user
from app.core.config import get_settings
from app.core.database import get_session
from app.services import subscriptions as subscription_service
from tubehub_shared.schemas.common import ApiResponse
from tubehub_shared.schemas.subscriptions import (
    ChannelSubscriber,
    SubscribedChannelsPage,
    SubscriptionCreated,
    SubscriptionStatus,
)

router = APIRouter()
settings = get_settings()


@router.get("/c/{channelId}/status", response_model=ApiResponse[SubscriptionStatus])
async def check_subscription_status(
    channelId: str,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Whether the requester is subscribed to a channel."""
    status = await subscription_service.check_subscription_status(
        session, auth.user_id, channelId
    )
    return ApiResponse(
        status_code=200,
        data=status,
        message="Subscription status retrieved successfully.",
    )


@router.post(
    "/c/{channelId}",
    response_model=ApiResponse[Union[SubscriptionCreated, SubscriptionStatus]],
)
async def toggle_subscription(
    channelId: str,
    response: Response,
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Subscribe to a channel, or unsubscribe if already subscribed (201 / 200)."""
    result = await subscription_service.toggle_subscription(
        session, auth.user_id, channelId
    )
    if isinstance(result, SubscriptionCreated):
        response.status_code = 201
        return ApiResponse(status_code=201, data=result, message="Subscribed successfully.")
    return ApiResponse(status_code=200, data=result, message="Unsubscribed successfully.")


@router.get("/subscribers", response_model=ApiResponse[List[ChannelSubscriber]])
async def list_channel_subscribers(
    userId: Optional[str] = Query(None),
    page: int = Query(1, ge=1, le=settings.max_page),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Subscribers of ``userId``'s channel (defaults to the requester's own)."""
    subscribers = await subscription_service.list_channel_subscribers(
        session, auth.user_id, user_id=userId, page=page, limit=limit
    )
    return ApiResponse(
        status_code=200,
        data=subscribers,
        message="Subscribers fetched successfully.",
    )


@router.get("/subscribed", response_model=ApiResponse[SubscribedChannelsPage])
async def list_subscribed_channels(
    userId: Optional[str] = Query(None),
    page: int = Query(1, ge=1, le=settings.max_page),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Channels ``userId`` follows (defaults to the requester), paginated."""
    data = await subscription_service.list_subscribed_channels(
        session, auth.user_id, user_id=userId, page=page, limit=limit
    )
    return ApiResponse(
        status_code=200,
        data=data,
        message="Fetched subscribed channels successfully",
    )


@router.get("/subscribed/search", response_model=ApiResponse[SubscribedChannelsPage])
async def search_subscribed_channels(
    userId: Optional[str] = Query(None),
    search: str = Query(""),
    page: int = Query(1, ge=1, le=settings.max_page),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    auth: AuthenticatedUser = Depends(get_authenticated_user),
    session: AsyncSession = Depends(get_session),
):
    """Channels ``userId`` follows, filtered by username / full name."""
    data = await subscription_service.search_subscribed_channels(
        session, auth.user_id, user_id=userId, search=search, page=page, limit=limit
    )
    return ApiResponse(
        status_code=200,
        data=data,
        message="Searched subscribed channels successfully",
    )
