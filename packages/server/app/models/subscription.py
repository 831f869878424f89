"""Subscription model: subscriber follows channel."""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Subscription(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
    )

    subscriber_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    channel_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
