"""
Gatherly Backend — ORM Models
===============================

Importing this package registers every mapped class with Base.metadata,
which relationship() string targets and Alembic autogenerate both need.

Entity Map:
    User ──< Photo                 (composition: photos die with their user)
    User ──< ActivityAttendee >── Activity
             (composite key: activity_id + app_user_id, is_host flag)
"""

from app.models.user import User
from app.models.photo import Photo
from app.models.activity import Activity, ActivityAttendee

__all__ = ["User", "Photo", "Activity", "ActivityAttendee"]
