"""
Gatherly Backend — User Repository
====================================

What:  Loads the user aggregate (user + photos) and account lookups.
Who:   PhotoService, ProfileService, AccountService, ActivityService.

Query plan (get_with_photos):
    SELECT * FROM users WHERE username = :username
    SELECT * FROM photos WHERE user_id IN (:id)     -- selectinload
    Two indexed lookups; photos are never lazy-loaded (not possible under
    asyncio without an explicit await).
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.user import User
from app.repositories.base import SqlAlchemyRepository


class UserRepository(SqlAlchemyRepository):
    """User aggregate access."""

    async def get_with_photos(self, username: str) -> Optional[User]:
        """Load a user by username with the photo collection populated."""
        result = await self.session.execute(
            select(User)
            .options(selectinload(User.photos))
            .where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User)
            .options(selectinload(User.photos))
            .where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def username_exists(self, username: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.username == username)
        )
        return result.first() is not None

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(User.id).where(User.email == email.lower())
        )
        return result.first() is not None

    def add(self, user: User) -> None:
        self.session.add(user)
