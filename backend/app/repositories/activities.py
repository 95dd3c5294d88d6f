"""
Gatherly Backend — Activity Repository
========================================

What:  Loads activities with their attendees (and each attendee's photos,
       needed for the attendee's profile image).
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.activity import Activity, ActivityAttendee
from app.models.user import User
from app.repositories.base import SqlAlchemyRepository


def _with_attendees():
    return (
        selectinload(Activity.attendees)
        .selectinload(ActivityAttendee.app_user)
        .selectinload(User.photos)
    )


class ActivityRepository(SqlAlchemyRepository):
    """Activity aggregate access."""

    async def list_with_attendees(self) -> List[Activity]:
        result = await self.session.execute(
            select(Activity).options(_with_attendees()).order_by(Activity.date)
        )
        return list(result.scalars().all())

    async def get_with_attendees(self, activity_id: uuid.UUID) -> Optional[Activity]:
        result = await self.session.execute(
            select(Activity).options(_with_attendees()).where(Activity.id == activity_id)
        )
        return result.scalar_one_or_none()

    def add(self, activity: Activity) -> None:
        self.session.add(activity)

    async def remove(self, activity: Activity) -> None:
        await self.session.delete(activity)
