"""
Gatherly Backend — Repository Tests (in-memory SQLite)
========================================================

What:  The unit-of-work counting, aggregate loading and the partial unique
       index on main photos, against a real (aiosqlite) database.
"""

import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import select

from app.exceptions import DatabaseError
from app.models.activity import Activity, ActivityAttendee
from app.models.photo import Photo
from app.models.user import User
from app.repositories.activities import ActivityRepository
from app.repositories.users import UserRepository
from app.services.photo_service import PhotoService
from app.services.user_accessor import StaticUserAccessor
from app.services.user_locks import UserLockRegistry


@pytest_asyncio.fixture
async def seeded(session_factory):
    """bob with main photo p0; alice with no photos."""
    async with session_factory() as session:
        bob = User(
            username="bob", email="bob@gatherly.dev", display_name="Bob", hashed_password="x"
        )
        bob.photos.append(Photo(id="p0", url="http://img/p0", is_main=True))
        alice = User(
            username="alice", email="alice@gatherly.dev", display_name="Alice", hashed_password="x"
        )
        session.add_all([bob, alice])
        await session.commit()


class TestUserRepository:

    @pytest.mark.asyncio
    async def test_get_with_photos_loads_collection(self, session_factory, seeded):
        async with session_factory() as session:
            bob = await UserRepository(session).get_with_photos("bob")

        # Session closed: photos must already be loaded
        assert [(p.id, p.is_main) for p in bob.photos] == [("p0", True)]
        assert bob.main_photo_url == "http://img/p0"

    @pytest.mark.asyncio
    async def test_missing_user_is_none(self, db_session, seeded):
        assert await UserRepository(db_session).get_with_photos("ghost") is None

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, db_session, seeded):
        repo = UserRepository(db_session)
        assert (await repo.get_by_email("BOB@gatherly.dev")).username == "bob"
        assert await repo.email_exists("Alice@Gatherly.dev")
        assert await repo.username_exists("alice")
        assert not await repo.username_exists("carol")

    @pytest.mark.asyncio
    async def test_save_changes_counts_changed_entities(self, db_session, seeded):
        repo = UserRepository(db_session)
        alice = await repo.get_with_photos("alice")

        alice.photos.append(Photo(id="p9", url="http://img/p9", is_main=True))

        assert await repo.save_changes() > 0

    @pytest.mark.asyncio
    async def test_save_without_changes_counts_zero(self, db_session, seeded):
        repo = UserRepository(db_session)
        await repo.get_with_photos("alice")

        assert await repo.save_changes() == 0

    @pytest.mark.asyncio
    async def test_second_main_photo_is_rejected_by_the_database(self, db_session, seeded):
        repo = UserRepository(db_session)
        bob = await repo.get_with_photos("bob")

        bob.photos.append(Photo(id="p1", url="http://img/p1", is_main=True))

        with pytest.raises(DatabaseError):
            await repo.save_changes()


class TestPhotoWorkflowAgainstDatabase:
    """PhotoService end to end with a real session and the fake image host."""

    def service(self, session, media, username):
        return PhotoService(
            UserRepository(session), media, StaticUserAccessor(username), UserLockRegistry()
        )

    @pytest.mark.asyncio
    async def test_attach_persists_main_photo(self, session_factory, seeded, fake_media):
        async with session_factory() as session:
            result = await self.service(session, fake_media, "alice").add_photo(b"F", "f.jpg")
        assert result.value.is_main

        async with session_factory() as session:
            rows = (await session.execute(select(Photo).where(Photo.id == result.value.id))).scalars().all()
        assert len(rows) == 1 and rows[0].is_main

    @pytest.mark.asyncio
    async def test_set_main_swaps_without_violating_the_index(
        self, session_factory, seeded, fake_media
    ):
        async with session_factory() as session:
            await self.service(session, fake_media, "bob").add_photo(b"F", "f.jpg")

        async with session_factory() as session:
            result = await self.service(session, fake_media, "bob").set_main_photo("p1")
        assert result.is_success

        async with session_factory() as session:
            bob = await UserRepository(session).get_with_photos("bob")
        assert {p.id: p.is_main for p in bob.photos} == {"p0": False, "p1": True}

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, session_factory, seeded, fake_media):
        async with session_factory() as session:
            await self.service(session, fake_media, "bob").add_photo(b"F", "f.jpg")

        async with session_factory() as session:
            result = await self.service(session, fake_media, "bob").delete_photo("p1")
        assert result.is_success
        assert fake_media.deleted == ["p1"]

        async with session_factory() as session:
            bob = await UserRepository(session).get_with_photos("bob")
        assert [p.id for p in bob.photos] == ["p0"]

    @pytest.mark.asyncio
    async def test_rejected_commit_removes_the_upload(self, session_factory, seeded, fake_media):
        """A row the database refuses (duplicate id) → Failure + compensation."""
        fake_media.next_ids = ["p0"]

        async with session_factory() as session:
            result = await self.service(session, fake_media, "alice").add_photo(b"F", "f.jpg")

        assert result.error == "Unable to upload photo!"
        assert fake_media.deleted == ["p0"]


class TestActivityRepository:

    @pytest.mark.asyncio
    async def test_attendees_are_loaded_with_their_photos(self, session_factory, seeded):
        activity_id = uuid.uuid4()
        async with session_factory() as session:
            users = UserRepository(session)
            bob = await users.get_with_photos("bob")
            alice = await users.get_with_photos("alice")
            activity = Activity(
                id=activity_id,
                title="Future Activity 2",
                date=datetime(2026, 12, 1, 20, 0, tzinfo=timezone.utc),
                description="Activity 2 months in future",
                category="music",
                city="London",
                venue="O2 Arena",
            )
            activity.attendees.append(ActivityAttendee(app_user=bob, is_host=True))
            activity.attendees.append(ActivityAttendee(app_user=alice, is_host=False))
            ActivityRepository(session).add(activity)
            assert await ActivityRepository(session).save_changes() > 0

        async with session_factory() as session:
            loaded = await ActivityRepository(session).get_with_attendees(activity_id)

        assert loaded.host.app_user.username == "bob"
        assert loaded.host.app_user.main_photo_url == "http://img/p0"
        assert sorted(a.app_user.username for a in loaded.attendees) == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_date(self, session_factory, seeded):
        async with session_factory() as session:
            repo = ActivityRepository(session)
            for title, day in [("later", 20), ("sooner", 5)]:
                repo.add(
                    Activity(
                        title=title,
                        date=datetime(2026, 12, day, tzinfo=timezone.utc),
                        description="d",
                        category="c",
                        city="x",
                        venue="v",
                    )
                )
            await repo.save_changes()

        async with session_factory() as session:
            titles = [a.title for a in await ActivityRepository(session).list_with_attendees()]
        assert titles == ["sooner", "later"]
