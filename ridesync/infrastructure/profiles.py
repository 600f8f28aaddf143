"""SQL-backed profile resolver: maps a requester email to display attributes."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridesync.domain.entities import Profile
from ridesync.domain.errors import ProfileResolutionError

from .repositories import UserRepository

logger = logging.getLogger(__name__)


class SqlProfileResolver:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def resolve(self, email: str) -> Optional[Profile]:
        """Return the profile for *email*, ``None`` if no such user exists."""
        try:
            async with self.session_factory() as session:
                user = await UserRepository(session).get_by_email(email)
        except SQLAlchemyError as exc:
            logger.error("Profile lookup for %s failed: %s", email, exc)
            raise ProfileResolutionError(f"Profile lookup for {email} failed") from exc

        if user is None:
            return None
        return Profile(
            user_name=user.user_name,
            school_name=user.school_name,
            phone_number=user.phone_number,
        )
