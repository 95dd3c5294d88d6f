"""
Gatherly Backend — User Model
===============================

What:  ORM model for the `users` table, the root of the user aggregate.
Why:   A user owns its photos outright and takes part in activities via
       ActivityAttendee rows.
Who:   Loaded by UserRepository (always fresh per request, photos eagerly
       included) and by AccountService for login/registration.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.photo import Photo
    from app.models.activity import ActivityAttendee


class User(Base):
    """
    Application user account.

    Identity:
        id       : stable string key (UUID text), referenced by foreign keys
        username : unique, used for every lookup by the identity resolver
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Owned Photos ──────────────────────────────────────────────────────
    # delete-orphan: removing a photo from this list deletes its row.
    photos: Mapped[List["Photo"]] = relationship(
        "Photo",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Photo.created_at",
    )

    # Attendance rows are owned by their Activity (see Activity.attendees).
    activities: Mapped[List["ActivityAttendee"]] = relationship(
        "ActivityAttendee",
        back_populates="app_user",
    )

    @property
    def main_photo_url(self) -> Optional[str]:
        """URL of the main photo, or None. Requires photos to be loaded."""
        main = next((p for p in self.photos if p.is_main), None)
        return main.url if main else None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
