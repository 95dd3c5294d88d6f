"""
Gatherly Backend — Activity Workflows
=======================================

What:  List, read, create, edit and delete activities, and join/leave/cancel
       via a single attendance toggle.
Who:   Activity routes, with request-scoped repositories sharing one session.

Authorization:
    Only the host (the attendee row with is_host) may edit or delete. A
    non-host gets ForbiddenError, which ends the request with 403; that is
    not an expected outcome of the workflow, so it is not a Failure.

Attendance toggle (update_attendance):
    caller is host          → is_cancelled flips
    caller attends, no host → caller's attendee row is removed
    caller not attending    → caller is added as a regular attendee
"""

import logging
import uuid
from typing import List, Optional

from app.core.result import Result
from app.exceptions import ForbiddenError
from app.models.activity import Activity, ActivityAttendee
from app.repositories.activities import ActivityRepository
from app.repositories.users import UserRepository
from app.schemas.activity import ActivityDto, ActivityFormValues
from app.services.profile_service import to_profile_summary
from app.services.user_accessor import UserAccessor

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("title", "date", "description", "category", "city", "venue")


def to_activity_dto(activity: Activity) -> ActivityDto:
    host = activity.host
    return ActivityDto(
        id=activity.id,
        title=activity.title,
        date=activity.date,
        description=activity.description,
        category=activity.category,
        city=activity.city,
        venue=activity.venue,
        is_cancelled=activity.is_cancelled,
        host_username=host.app_user.username if host else None,
        attendees=[to_profile_summary(a.app_user) for a in activity.attendees],
    )


class ActivityService:
    """Activity workflows for the current user."""

    def __init__(
        self,
        activities: ActivityRepository,
        users: UserRepository,
        user_accessor: UserAccessor,
    ):
        self.activities = activities
        self.users = users
        self.user_accessor = user_accessor

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_activities(self) -> Result[List[ActivityDto]]:
        activities = await self.activities.list_with_attendees()
        return Result.success([to_activity_dto(a) for a in activities])

    async def get_activity(self, activity_id: uuid.UUID) -> Optional[Result[ActivityDto]]:
        activity = await self.activities.get_with_attendees(activity_id)
        if activity is None:
            return None
        return Result.success(to_activity_dto(activity))

    # ── Commands ──────────────────────────────────────────────────────────

    async def create_activity(self, form: ActivityFormValues) -> Optional[Result[None]]:
        """Create an activity hosted by the current user."""
        username = self.user_accessor.get_username()
        user = await self.users.get_with_photos(username)
        if user is None:
            return None

        activity = Activity(
            id=form.id or uuid.uuid4(),
            is_cancelled=False,
            **{field: getattr(form, field) for field in _EDITABLE_FIELDS},
        )
        activity.attendees.append(ActivityAttendee(app_user=user, is_host=True))
        self.activities.add(activity)

        if await self.activities.save_changes() > 0:
            logger.info("'%s' created activity %s", username, activity.id)
            return Result.success()
        await self.activities.discard_changes()
        return Result.failure("Failed to create activity")

    async def edit_activity(
        self, activity_id: uuid.UUID, form: ActivityFormValues
    ) -> Optional[Result[None]]:
        """
        Overwrite the editable fields of an activity the caller hosts.

        Submitting identical values saves nothing and is reported as a
        Failure, the same as any other zero-change save.
        """
        activity = await self.activities.get_with_attendees(activity_id)
        if activity is None:
            return None
        self._require_host(activity)

        for field in _EDITABLE_FIELDS:
            setattr(activity, field, getattr(form, field))

        if await self.activities.save_changes() > 0:
            return Result.success()
        await self.activities.discard_changes()
        return Result.failure("Failed to update activity")

    async def delete_activity(self, activity_id: uuid.UUID) -> Optional[Result[None]]:
        activity = await self.activities.get_with_attendees(activity_id)
        if activity is None:
            return None
        self._require_host(activity)

        await self.activities.remove(activity)

        if await self.activities.save_changes() > 0:
            logger.info("Deleted activity %s", activity_id)
            return Result.success()
        await self.activities.discard_changes()
        return Result.failure("Failed to delete the activity")

    async def update_attendance(self, activity_id: uuid.UUID) -> Optional[Result[None]]:
        activity = await self.activities.get_with_attendees(activity_id)
        if activity is None:
            return None

        username = self.user_accessor.get_username()
        user = await self.users.get_with_photos(username)
        if user is None:
            return None

        host = activity.host
        attendance = next(
            (a for a in activity.attendees if a.app_user.username == username), None
        )

        if attendance is not None and host is not None and host.app_user.username == username:
            activity.is_cancelled = not activity.is_cancelled
            logger.info("Activity %s cancelled=%s by host", activity_id, activity.is_cancelled)
        elif attendance is not None:
            activity.attendees.remove(attendance)
        else:
            activity.attendees.append(ActivityAttendee(app_user=user, is_host=False))

        if await self.activities.save_changes() > 0:
            return Result.success()
        await self.activities.discard_changes()
        return Result.failure("Problem updating attendance")

    def _require_host(self, activity: Activity) -> None:
        username = self.user_accessor.get_username()
        host = activity.host
        if host is None or host.app_user.username != username:
            logger.warning("'%s' tried to modify activity %s they do not host", username, activity.id)
            raise ForbiddenError(
                message="Only the host can change this activity",
                context={"activity_id": str(activity.id), "username": username},
            )
