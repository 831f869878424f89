"""
Subscription service layer: business logic for channel subscriptions.

Handles:
- Subscription status lookup and toggling (subscribe / unsubscribe)
- Subscriber listing for a channel
- Subscribed-channel listing and search, with audience size per channel and
  whether the requester follows each channel too

Every function takes the requester explicitly; nothing here reads request
state.
"""

from __future__ import annotations

import math
import uuid
from typing import Optional, Union

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalError, InvalidInput, NotFound, translate_store_errors
from app.models.subscription import Subscription
from app.models.user import User
from tubehub_shared.schemas.subscriptions import (
    ChannelSubscriber,
    SubscribedChannel,
    SubscribedChannelsPage,
    SubscriptionCreated,
    SubscriptionStatus,
)

log = structlog.get_logger()

LIKE_ESCAPE = "\\"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_identifier(value: Optional[str], label: str) -> uuid.UUID:
    """Parse a user/channel id from request input, raising ``InvalidInput``."""
    if value is None or not str(value).strip():
        raise InvalidInput(f"{label.capitalize()} id is required.")
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise InvalidInput(f"Invalid {label} id.") from None


def resolve_target(user_id: Optional[str], requester_id: uuid.UUID) -> uuid.UUID:
    """The user a listing is about: ``user_id`` if given, else the requester."""
    if user_id is None or not str(user_id).strip():
        return requester_id
    return parse_identifier(user_id, "user")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def _check_paging(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidInput("Page must be 1 or greater.")
    if limit < 1:
        raise InvalidInput("Limit must be 1 or greater.")


async def _get_edge(
    session: AsyncSession, subscriber_id: uuid.UUID, channel_id: uuid.UUID
) -> Optional[Subscription]:
    result = await session.execute(
        select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
    )
    return result.scalar_one_or_none()


async def _ensure_user_exists(session: AsyncSession, user_id: uuid.UUID, message: str) -> None:
    result = await session.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        raise NotFound(message)


# ---------------------------------------------------------------------------
# Status & toggle
# ---------------------------------------------------------------------------

async def check_subscription_status(
    session: AsyncSession,
    requester_id: uuid.UUID,
    channel_id: Optional[str],
) -> SubscriptionStatus:
    """Whether the requester follows ``channel_id``."""
    channel = parse_identifier(channel_id, "channel")
    edge = await _get_edge(session, requester_id, channel)
    return SubscriptionStatus(is_subscribed=edge is not None)


async def toggle_subscription(
    session: AsyncSession,
    requester_id: uuid.UUID,
    channel_id: Optional[str],
) -> Union[SubscriptionStatus, SubscriptionCreated]:
    """Subscribe the requester to a channel, or unsubscribe if already subscribed.

    Returns ``SubscriptionCreated`` after a subscribe and a plain
    ``SubscriptionStatus`` (``is_subscribed=False``) after an unsubscribe.
    """
    channel = parse_identifier(channel_id, "channel")
    await _ensure_user_exists(session, channel, "Channel not found.")

    existing = await _get_edge(session, requester_id, channel)
    if existing:
        result = await session.execute(
            delete(Subscription).where(Subscription.id == existing.id)
        )
        if result.rowcount == 0:
            raise InternalError("Subscription not found or already unsubscribed.")
        log.info(
            "subscription.removed",
            subscriber_id=str(requester_id),
            channel_id=str(channel),
        )
        return SubscriptionStatus(is_subscribed=False)

    edge = Subscription(subscriber_id=requester_id, channel_id=channel)
    try:
        async with session.begin_nested():
            session.add(edge)
    except IntegrityError:
        # A concurrent toggle inserted the same pair first.
        edge = await _get_edge(session, requester_id, channel)
        if edge is None:
            raise InternalError("Internal Server Error: Subscription could not be created.")
        log.info(
            "subscription.create_raced",
            subscriber_id=str(requester_id),
            channel_id=str(channel),
        )
    except SQLAlchemyError as exc:
        log.error("subscription.create_failed", channel_id=str(channel), error=str(exc))
        raise InternalError(
            "Internal Server Error: Subscription could not be created."
        ) from exc
    else:
        log.info(
            "subscription.created",
            subscriber_id=str(requester_id),
            channel_id=str(channel),
        )

    return SubscriptionCreated(
        id=edge.id,
        subscriber=edge.subscriber_id,
        channel=edge.channel_id,
        created_at=edge.created_at,
        updated_at=edge.updated_at,
    )


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

@translate_store_errors("Something went wrong while fetching subscribers")
async def list_channel_subscribers(
    session: AsyncSession,
    requester_id: uuid.UUID,
    user_id: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> list[ChannelSubscriber]:
    """Subscribers of a channel, oldest subscription first."""
    _check_paging(page, limit)
    channel = resolve_target(user_id, requester_id)
    await _ensure_user_exists(session, channel, "User not found.")

    total = await session.scalar(
        select(func.count())
        .select_from(Subscription)
        .where(Subscription.channel_id == channel)
    )
    if not total:
        raise NotFound("No subscribers found for this channel.")

    result = await session.execute(
        select(
            User.id.label("subscriber"),
            User.username,
            User.full_name,
            User.avatar,
        )
        .join(Subscription, Subscription.subscriber_id == User.id)
        .where(Subscription.channel_id == channel)
        .order_by(Subscription.created_at, Subscription.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return [
        ChannelSubscriber(
            subscriber=row.subscriber,
            username=row.username,
            full_name=row.full_name,
            avatar=row.avatar,
        )
        for row in result.all()
    ]


async def _subscribed_channels_page(
    session: AsyncSession,
    requester_id: uuid.UUID,
    target_id: uuid.UUID,
    page: int,
    limit: int,
    search: str = "",
) -> SubscribedChannelsPage:
    """Count, page and enrich the channels ``target_id`` follows."""
    filters = [Subscription.subscriber_id == target_id]
    if search:
        pattern = f"%{escape_like(search)}%"
        filters.append(
            or_(
                User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.username.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    total = await session.scalar(
        select(func.count())
        .select_from(Subscription)
        .join(User, User.id == Subscription.channel_id)
        .where(*filters)
    ) or 0

    audience = (
        select(
            Subscription.channel_id.label("channel_id"),
            func.count().label("total_subscribers"),
        )
        .group_by(Subscription.channel_id)
        .subquery()
    )
    result = await session.execute(
        select(
            User.id,
            User.username,
            User.full_name,
            User.avatar,
            func.coalesce(audience.c.total_subscribers, 0).label("total_subscribers"),
        )
        .select_from(Subscription)
        .join(User, User.id == Subscription.channel_id)
        .outerjoin(audience, audience.c.channel_id == Subscription.channel_id)
        .where(*filters)
        .order_by(Subscription.created_at, Subscription.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = result.all()

    # Batch lookup: which of this page's channels does the requester follow?
    channel_ids = [row.id for row in rows]
    followed: set[uuid.UUID] = set()
    if channel_ids:
        mine = await session.execute(
            select(Subscription.channel_id).where(
                Subscription.subscriber_id == requester_id,
                Subscription.channel_id.in_(channel_ids),
            )
        )
        followed = set(mine.scalars().all())

    return SubscribedChannelsPage(
        subscribed_channels=[
            SubscribedChannel(
                id=row.id,
                username=row.username,
                full_name=row.full_name,
                avatar=row.avatar,
                total_subscribers=row.total_subscribers,
                is_subscribed_by_me=row.id in followed,
            )
            for row in rows
        ],
        current_page=page,
        total_pages=total_pages(total, limit),
        total_subscribed_channels=total,
    )


@translate_store_errors("Something went wrong while fetching subscribed channels")
async def list_subscribed_channels(
    session: AsyncSession,
    requester_id: uuid.UUID,
    user_id: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> SubscribedChannelsPage:
    """Channels a user follows. An empty page is a valid result."""
    _check_paging(page, limit)
    target = resolve_target(user_id, requester_id)
    await _ensure_user_exists(session, target, "User not found.")
    return await _subscribed_channels_page(session, requester_id, target, page, limit)


@translate_store_errors("Something went wrong while searching for subscribed channels")
async def search_subscribed_channels(
    session: AsyncSession,
    requester_id: uuid.UUID,
    user_id: Optional[str] = None,
    search: str = "",
    page: int = 1,
    limit: int = 10,
) -> SubscribedChannelsPage:
    """Channels a user follows whose username or full name contains ``search``."""
    _check_paging(page, limit)
    target = resolve_target(user_id, requester_id)
    await _ensure_user_exists(session, target, "User not found.")
    return await _subscribed_channels_page(
        session, requester_id, target, page, limit, search=(search or "").strip()
    )
