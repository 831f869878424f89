"""Subscription schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .common import CamelModel


# ---------------------------------------------------------------------------
# Status / toggle
# ---------------------------------------------------------------------------

class SubscriptionStatus(CamelModel):
    """Whether the requester follows a channel."""
    is_subscribed: bool


class SubscriptionCreated(SubscriptionStatus):
    """A freshly created subscription edge."""
    id: uuid.UUID = Field(alias="_id")
    subscriber: uuid.UUID
    channel: uuid.UUID
    created_at: datetime
    updated_at: datetime
    is_subscribed: bool = True


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

class ChannelSubscriber(CamelModel):
    """One subscriber of a channel."""
    subscriber: uuid.UUID
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None


class SubscribedChannel(CamelModel):
    """A channel the target user follows, with its audience size."""
    id: uuid.UUID = Field(alias="_id")
    username: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    total_subscribers: int = 0
    is_subscribed_by_me: bool = False


class SubscribedChannelsPage(CamelModel):
    """One page of subscribed channels."""
    subscribed_channels: List[SubscribedChannel]
    current_page: int
    total_pages: int
    total_subscribed_channels: int
