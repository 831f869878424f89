"""
Shared fixtures: an in-memory SQLite database behind the real application.
"""

import os

os.environ.setdefault("TUBEHUB_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TUBEHUB_LOG_FORMAT", "text")
os.environ.setdefault("TUBEHUB_SECRET_KEY", "test-secret-key-with-at-least-32-bytes")

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.core.auth import create_access_token
from app.core.database import get_session
from app.main import create_app
from app.models import Subscription, User


@pytest.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    # pysqlite's implicit transactions break SAVEPOINT; let SQLAlchemy emit BEGIN.
    @event.listens_for(eng.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def make_user(session_factory):
    """Persist a user in its own committed session."""

    async def _make(
        username: str,
        full_name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        async with session_factory() as s:
            user = User(
                username=username,
                full_name=full_name or username.title(),
                avatar=avatar or f"https://cdn.tubehub.test/{username}.png",
            )
            s.add(user)
            await s.commit()
            return user

    return _make


@pytest.fixture
def subscribe(session_factory):
    """Persist a subscription edge directly, bypassing the API."""

    async def _subscribe(subscriber: User, channel: User) -> Subscription:
        async with session_factory() as s:
            edge = Subscription(subscriber_id=subscriber.id, channel_id=channel.id)
            s.add(edge)
            await s.commit()
            return edge

    return _subscribe


@pytest.fixture
def app(session_factory):
    application = create_app()

    async def _get_test_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    application.dependency_overrides[get_session] = _get_test_session
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    """Bearer headers for a given user."""

    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}

    return _headers
