"""
Gatherly Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy:
    Unit level (no database):
    ├── users_repo:       UserRepository double with AsyncMock methods
    ├── fake_media:       in-memory MediaGateway recording uploads/deletes
    └── make_user:        transient User objects with optional photos

    Database level (in-memory aiosqlite, fresh per test):
    ├── db_engine:        engine with all tables created
    ├── session_factory:  async_sessionmaker bound to db_engine
    └── db_session:       one AsyncSession

    HTTP level:
    ├── test_app:         create_app() with the DB session and media gateway
    │                     dependencies overridden
    ├── test_client:      httpx AsyncClient over ASGITransport
    └── register_user:    POST /api/account/register helper returning a token
"""

import os

# Settings are read when app.config is first imported; set the test
# environment before any app import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-for-production"
os.environ["MEDIA_CLOUD_NAME"] = "demo"
os.environ["MEDIA_API_KEY"] = "test-key"
os.environ["MEDIA_API_SECRET"] = "test-secret"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Dict, List, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db_session  # noqa: E402
from app.dependencies import get_media_gateway  # noqa: E402
from app.exceptions import MediaGatewayError  # noqa: E402
from app.models.photo import Photo  # noqa: E402
from app.models.user import User  # noqa: E402
from app.repositories.users import UserRepository  # noqa: E402
from app.services.media_base import MediaGateway, PhotoUploadResult  # noqa: E402

PASSWORD = "Pa$$w0rd"


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeMediaGateway(MediaGateway):
    """
    In-memory image host.

    Uploads get sequential ids (p1, p2, ...) unless `next_ids` is primed;
    set `fail_uploads` / `fail_deletes` to simulate an unreachable host.
    """

    def __init__(self):
        self.uploads: List[str] = []
        self.deleted: List[str] = []
        self.stored: Dict[str, bytes] = {}
        self.next_ids: List[str] = []
        self.fail_uploads = False
        self.fail_deletes = False
        self.delete_result = True
        self._counter = 0

    async def upload(self, content: bytes, filename: str) -> PhotoUploadResult:
        if self.fail_uploads:
            raise MediaGatewayError(message="upload refused")
        if self.next_ids:
            public_id = self.next_ids.pop(0)
        else:
            self._counter += 1
            public_id = f"p{self._counter}"
        self.uploads.append(public_id)
        self.stored[public_id] = content
        return PhotoUploadResult(public_id=public_id, url=f"http://img/{public_id}")

    async def delete(self, public_id: str) -> bool:
        if self.fail_deletes:
            raise MediaGatewayError(message="delete refused")
        self.deleted.append(public_id)
        self.stored.pop(public_id, None)
        return self.delete_result


# ══════════════════════════════════════════════════════════════════════════
# Unit-Level Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_media():
    return FakeMediaGateway()


@pytest.fixture
def users_repo():
    """
    A UserRepository stand-in.

    Usage:
        users_repo.get_with_photos.return_value = make_user("alice")
        users_repo.save_changes.return_value = 0   # simulate nothing saved
    """
    repo = MagicMock(spec=UserRepository)
    repo.get_with_photos = AsyncMock(return_value=None)
    repo.get_by_email = AsyncMock(return_value=None)
    repo.username_exists = AsyncMock(return_value=False)
    repo.email_exists = AsyncMock(return_value=False)
    repo.save_changes = AsyncMock(return_value=1)
    repo.flush = AsyncMock()
    repo.discard_changes = AsyncMock()
    repo.add = MagicMock()
    return repo


@pytest.fixture
def make_user():
    """Factory for transient users: make_user("bob", photos=[("p0", True)])."""

    def _make(username: str, photos: Optional[List[tuple]] = None, **fields) -> User:
        user = User(
            id=fields.pop("id", f"id-{username}"),
            username=username,
            email=fields.pop("email", f"{username}@gatherly.dev"),
            display_name=fields.pop("display_name", username.title()),
            hashed_password=fields.pop("hashed_password", "not-a-hash"),
            **fields,
        )
        for photo_id, is_main in photos or []:
            user.photos.append(Photo(id=photo_id, url=f"http://img/{photo_id}", is_main=is_main))
        return user

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory SQLite database with every table created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_app(session_factory, fake_media):
    """
    A fresh application per test: its own rate limiter, an in-memory
    database and the fake image host.
    """
    from app.main import create_app

    application = create_app()

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_session
    application.dependency_overrides[get_media_gateway] = lambda: fake_media
    return application


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """Registers a user through the API and returns its bearer token."""

    async def _register(username: str) -> str:
        response = await test_client.post(
            "/api/account/register",
            json={
                "email": f"{username}@gatherly.dev",
                "username": username,
                "displayName": username.title(),
                "password": PASSWORD,
            },
        )
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _register


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
