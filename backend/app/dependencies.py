"""
Gatherly Backend — FastAPI Dependencies
=========================================

What:  Bearer-token authentication and the service providers routes use.
How:   Each request gets its own AsyncSession (get_db_session); repositories
       built from it share that session, so one service call is one unit of
       work. The media gateway and the lock registry are process-wide.

Overriding in tests:
    app.dependency_overrides[get_media_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_db_session] = session_override
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.repositories.activities import ActivityRepository
from app.repositories.users import UserRepository
from app.security import decode_access_token
from app.services.account_service import AccountService
from app.services.activity_service import ActivityService
from app.services.media_base import MediaGateway
from app.services.media_gateway import media_gateway
from app.services.photo_service import PhotoService
from app.services.profile_service import ProfileService
from app.services.user_accessor import StaticUserAccessor, UserAccessor
from app.services.user_locks import user_locks

logger = logging.getLogger(__name__)

# auto_error=False so a missing header goes through AuthenticationError
# and gets the standard error body.
bearer_scheme = HTTPBearer(auto_error=False)


# ── Identity ──────────────────────────────────────────────────────────────

async def get_current_username(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Username from a valid bearer token, else 401."""
    if credentials is None:
        raise AuthenticationError(context={"reason": "no_token"})

    username = decode_access_token(credentials.credentials)
    if username is None:
        raise AuthenticationError(context={"reason": "invalid_or_expired_token"})
    return username


async def get_user_accessor(
    username: str = Depends(get_current_username),
) -> UserAccessor:
    return StaticUserAccessor(username)


def get_media_gateway() -> MediaGateway:
    return media_gateway


# ── Services ──────────────────────────────────────────────────────────────

async def get_photo_service(
    db: AsyncSession = Depends(get_db_session),
    media: MediaGateway = Depends(get_media_gateway),
    user_accessor: UserAccessor = Depends(get_user_accessor),
) -> PhotoService:
    return PhotoService(UserRepository(db), media, user_accessor, user_locks)


async def get_activity_service(
    db: AsyncSession = Depends(get_db_session),
    user_accessor: UserAccessor = Depends(get_user_accessor),
) -> ActivityService:
    return ActivityService(ActivityRepository(db), UserRepository(db), user_accessor)


async def get_profile_service(
    db: AsyncSession = Depends(get_db_session),
) -> ProfileService:
    return ProfileService(UserRepository(db))


async def get_account_service(
    db: AsyncSession = Depends(get_db_session),
) -> AccountService:
    return AccountService(UserRepository(db))


async def get_authenticated_account_service(
    db: AsyncSession = Depends(get_db_session),
    user_accessor: UserAccessor = Depends(get_user_accessor),
) -> AccountService:
    return AccountService(UserRepository(db), user_accessor)
