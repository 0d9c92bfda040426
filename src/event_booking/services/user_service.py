"""
User Service - find-or-create identities coming back from the OAuth provider
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from event_booking.core.database import Database
from event_booking.models import User, UserRole
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Service for user lookups during authentication"""

    def __init__(self, database: Database):
        self.database = database

    async def get_by_id(self, user_id: int) -> Optional[User]:
        async with self.database.session() as session:
            return await session.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self.database.session() as session:
            return await session.scalar(select(User).where(User.email == email))

    async def get_or_create(
        self,
        email: str,
        name: str,
        image: Optional[str] = None,
        provider: str = "google",
    ) -> User:
        """Return the user with this email, creating it on first login"""
        existing = await self.get_by_email(email)
        if existing:
            return existing

        try:
            async with self.database.transaction() as session:
                user = User(
                    name=name,
                    email=email,
                    image=image,
                    provider=provider,
                    role=UserRole.USER,
                )
                session.add(user)
                await session.flush()
                await session.refresh(user)
        except IntegrityError:
            # Two first logins raced on the unique email
            user = await self.get_by_email(email)
            if user is None:
                raise
            return user

        logger.info(f"User {user.id} created via {provider}", extra={"user_id": user.id})
        return user

    async def set_role(self, user_id: int, role: UserRole) -> Optional[User]:
        async with self.database.transaction() as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            user.role = role
        return user
