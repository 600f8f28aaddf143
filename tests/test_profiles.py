"""
SQL profile resolver against an in-memory SQLite database (via aiosqlite).
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ridesync.domain.entities import Profile
from ridesync.domain.errors import ProfileResolutionError
from ridesync.infrastructure.database import Base
from ridesync.infrastructure.models import UserModel
from ridesync.infrastructure.profiles import SqlProfileResolver
from ridesync.infrastructure.repositories import UserRepository

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables, seed one profile, then drop everything."""
    engine = create_async_engine(TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await UserRepository(session).create(
            UserModel(
                email="maya@example.edu",
                user_name="Maya Chen",
                school_name="Lincoln High",
                phone_number="555-0101",
            )
        )
        await session.commit()

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.mark.asyncio
async def test_resolves_profile(session_factory):
    profile = await SqlProfileResolver(session_factory).resolve("maya@example.edu")
    assert profile == Profile("Maya Chen", "Lincoln High", "555-0101")


@pytest.mark.asyncio
async def test_unknown_email_is_none(session_factory):
    assert await SqlProfileResolver(session_factory).resolve("nobody@example.edu") is None


@pytest.mark.asyncio
async def test_database_error_raises_profile_resolution_error():
    engine = create_async_engine(TEST_DB_URL, echo=False)  # no tables created
    factory = async_sessionmaker(engine, class_=AsyncSession)
    try:
        with pytest.raises(ProfileResolutionError) as exc_info:
            await SqlProfileResolver(factory).resolve("maya@example.edu")
        assert isinstance(exc_info.value.__cause__, OperationalError)
    finally:
        await engine.dispose()
