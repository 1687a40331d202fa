"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import Base, User


def make_users():
    return [
        User(id=1, first_name="Robert", last_name="Smith", email="robert@example.com",
             created_at=datetime(2024, 3, 5, 10, 0)),
        User(id=2, first_name="Alice", last_name="Jones", email="a@b.com",
             created_at=datetime(2024, 3, 6, 9, 30)),
        User(id=3, first_name="Bob", last_name="Roberts", email="bob@example.com",
             created_at=datetime(2024, 3, 7, 12, 0), deleted_at=datetime(2024, 4, 1)),
        User(id=4, first_name="Carol", last_name="White", email="carol@example.com",
             created_at=datetime(2024, 3, 8, 8, 15)),
        User(id=5, first_name="Dave", last_name="Brown", email="dave@example.com",
             created_at=datetime(2024, 3, 9, 23, 59)),
    ]


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every connection of the test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    """Session over a users table holding five rows."""
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        session.add_all(make_users())
        await session.commit()
        yield session
