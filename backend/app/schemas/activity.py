"""
Gatherly Backend — Activity Schemas
=====================================

What:  Request and response shapes for the activities endpoints.
Why:   ActivityFormValues is the single validation point for create/edit;
       every field the activity form collects is required.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel
from app.schemas.profile import ProfileSummary


class ActivityFormValues(CamelModel):
    """
    Body of POST /api/activities and PUT /api/activities/{id}.

    The optional id lets the client choose the identifier on create, so it
    can navigate to the new activity without waiting for a response body.
    """
    id: Optional[uuid.UUID] = None
    title: str = Field(min_length=1, max_length=200)
    date: datetime
    description: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    venue: str = Field(min_length=1, max_length=200)

    @field_validator("title", "description", "category", "city", "venue")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ActivityDto(CamelModel):
    """An activity with its host and attendee list."""
    id: uuid.UUID
    title: str
    date: datetime
    description: str
    category: str
    city: str
    venue: str
    is_cancelled: bool = False
    host_username: Optional[str] = None
    attendees: List[ProfileSummary] = Field(default_factory=list)
