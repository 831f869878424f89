"""
Script to create a user for local testing and print an access token for it.

    python -m app.scripts.create_local_user --username alice --full-name "Alice Liddell"
"""

import argparse
import asyncio
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import create_access_token
from app.core.database import get_session_context, init_db
from app.models.user import User


async def ensure_user(
    session: AsyncSession,
    username: str,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
) -> tuple[User, bool]:
    """Return the user named ``username``, creating it if needed. Returns (user, created)."""
    result = await session.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user:
        return user, False

    user = User(username=username, full_name=full_name or username, email=email)
    session.add(user)
    await session.flush()
    return user, True


async def create_user(username: str, full_name: Optional[str], email: Optional[str]) -> None:
    await init_db()
    async with get_session_context() as session:
        user, created = await ensure_user(session, username, full_name, email)
        if created:
            print(f"Created user: {username} ({user.id})")
        else:
            print(f"User {username} already exists ({user.id}).")

    print("Access token:")
    print(create_access_token(user.id, user.username))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create a local user and print an access token.")
    parser.add_argument("--username", required=True, help="Username (also the channel handle)")
    parser.add_argument("--full-name", default=None, help="Display name")
    parser.add_argument("--email", default=None, help="Email address")

    args = parser.parse_args()

    asyncio.run(create_user(args.username, args.full_name, args.email))
