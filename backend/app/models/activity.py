"""
Gatherly Backend — Activity and Attendance Models
===================================================

What:  The `activities` table and the `activity_attendees` join table.
Why:   Users create activities and sign up for them; the attendee row
       records who hosts.

Join Entity:
    ActivityAttendee has a composite primary key (activity_id, app_user_id),
    so a user can attend a given activity at most once. It maps many-to-one
    to both sides; Activity.attendees and User.activities are the reverse
    collections.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class Activity(Base):
    """A scheduled event that users can attend."""

    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    venue: Mapped[str] = mapped_column(String(200), nullable=False)
    is_cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    attendees: Mapped[List["ActivityAttendee"]] = relationship(
        "ActivityAttendee",
        back_populates="activity",
        cascade="all, delete-orphan",
    )

    @property
    def host(self) -> Optional["ActivityAttendee"]:
        """The hosting attendee, if attendees are loaded and one is flagged."""
        return next((a for a in self.attendees if a.is_host), None)

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, title='{self.title}')>"


class ActivityAttendee(Base):
    """Membership of one user in one activity."""

    __tablename__ = "activity_attendees"

    activity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("activities.id", ondelete="CASCADE"),
        primary_key=True,
    )
    app_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    is_host: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    activity: Mapped["Activity"] = relationship("Activity", back_populates="attendees")
    app_user: Mapped["User"] = relationship("User", back_populates="activities")

    def __repr__(self) -> str:
        return (
            f"<ActivityAttendee(activity_id={self.activity_id}, "
            f"app_user_id={self.app_user_id}, is_host={self.is_host})>"
        )
