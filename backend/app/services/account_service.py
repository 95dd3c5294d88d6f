"""
Gatherly Backend — Accounts
=============================

Registration, login and "who am I". Each returns a UserDto with a freshly
issued bearer token. Unlike the photo and activity workflows these raise
instead of returning a Result: a taken username or a wrong password ends
the request, there is nothing for the caller to branch on.
"""

import logging
from typing import Optional

from app.exceptions import AuthenticationError, ValidationError
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.account import UserDto
from app.security import create_access_token, hash_password, verify_password
from app.services.user_accessor import UserAccessor

logger = logging.getLogger(__name__)


def to_user_dto(user: User) -> UserDto:
    return UserDto(
        display_name=user.display_name,
        username=user.username,
        image=user.main_photo_url,
        token=create_access_token(user.username),
    )


class AccountService:
    """Account operations backed by the users table."""

    def __init__(self, users: UserRepository, user_accessor: Optional[UserAccessor] = None):
        self.users = users
        self.user_accessor = user_accessor

    async def register(
        self, email: str, username: str, display_name: str, password: str
    ) -> UserDto:
        """
        Create an account.

        Raises:
            ValidationError: "Email taken" or "Username taken"
        """
        if await self.users.email_exists(email):
            raise ValidationError("Email taken", field="email")
        if await self.users.username_exists(username):
            raise ValidationError("Username taken", field="username")

        user = User(
            email=email.lower(),
            username=username,
            display_name=display_name,
            hashed_password=hash_password(password),
        )
        self.users.add(user)
        await self.users.save_changes()
        logger.info("Registered user '%s'", username)

        # A brand-new user has no photos; skip the lazy collection.
        return UserDto(
            display_name=user.display_name,
            username=user.username,
            image=None,
            token=create_access_token(user.username),
        )

    async def login(self, email: str, password: str) -> UserDto:
        """
        Raises:
            AuthenticationError: unknown email or wrong password (same
                message for both, so emails cannot be probed)
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password")
        return to_user_dto(user)

    async def current_user(self) -> UserDto:
        """
        Raises:
            AuthenticationError: the token names a user that no longer exists
        """
        username = self.user_accessor.get_username()
        user = await self.users.get_with_photos(username)
        if user is None:
            raise AuthenticationError(context={"username": username})
        return to_user_dto(user)
