"""
Gatherly Backend — Profile and Photo Schemas
==============================================

What:  API shapes for user profiles and their photos.
Who:   Returned by GET /api/profiles/{username}, POST /api/photos, and
       embedded as attendee entries in activities.
"""

from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class PhotoDto(CamelModel):
    """A hosted photo as the client sees it."""
    id: str = Field(description="Identifier assigned by the image host")
    url: str = Field(description="Public URL of the image")
    is_main: bool = Field(description="Whether this is the user's profile image")


class ProfileSummary(CamelModel):
    """Compact profile used for activity attendees."""
    username: str
    display_name: str
    bio: Optional[str] = None
    image: Optional[str] = Field(default=None, description="Main photo URL, if any")


class Profile(ProfileSummary):
    """Full profile including the photo gallery."""
    photos: List[PhotoDto] = Field(default_factory=list)
