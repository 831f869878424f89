"""User model. Every user also owns a channel."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    username: str = Field(unique=True, index=True, nullable=False)
    email: Optional[str] = Field(default=None, unique=True, index=True)
    full_name: Optional[str] = Field(default=None, index=True)
    avatar: Optional[str] = None  # image URL
    cover_image: Optional[str] = None
