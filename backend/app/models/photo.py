"""
Gatherly Backend — Photo Model
================================

What:  ORM model for the `photos` table.
Why:   Records an image hosted by the media gateway and attached to a user.

Table Design:
    - id: the gateway's public identifier. Never generated locally; it is
      also the handle used to delete the remote image.
    - url: opaque string returned by the gateway, not validated here.
    - is_main: at most one TRUE per user.

Main-photo invariant:
    ux_photos_one_main_per_user is a partial unique index over user_id
    restricted to main photos. Workflows serialize per user in-process
    (UserLockRegistry); the index is what rejects a second main photo when
    two processes race.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class Photo(Base):
    """A hosted image owned by exactly one user."""

    __tablename__ = "photos"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)
    is_main: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship("User", back_populates="photos")

    __table_args__ = (
        Index(
            "ux_photos_one_main_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_main"),
            sqlite_where=text("is_main = 1"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Photo(id='{self.id}', is_main={self.is_main})>"
