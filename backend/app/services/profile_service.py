"""
Gatherly Backend — Profiles
=============================

Read-only view of a user: display data, main image and photo gallery.
The ORM → schema mapping helpers here are reused by ActivityService for
attendee entries.
"""

import logging
from typing import Optional

from app.core.result import Result
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.profile import PhotoDto, Profile, ProfileSummary

logger = logging.getLogger(__name__)


def to_profile_summary(user: User) -> ProfileSummary:
    return ProfileSummary(
        username=user.username,
        display_name=user.display_name,
        bio=user.bio,
        image=user.main_photo_url,
    )


def to_profile(user: User) -> Profile:
    return Profile(
        username=user.username,
        display_name=user.display_name,
        bio=user.bio,
        image=user.main_photo_url,
        photos=[PhotoDto(id=p.id, url=p.url, is_main=p.is_main) for p in user.photos],
    )


class ProfileService:
    """Profile lookups by username."""

    def __init__(self, users: UserRepository):
        self.users = users

    async def get_profile(self, username: str) -> Optional[Result[Profile]]:
        user = await self.users.get_with_photos(username)
        if user is None:
            logger.debug("Profile '%s' not found", username)
            return None
        return Result.success(to_profile(user))
