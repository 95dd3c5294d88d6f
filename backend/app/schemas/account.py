"""
Gatherly Backend — Account Schemas
====================================

What:  Login/registration bodies and the authenticated-user response.
"""

import re
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel

# At least one digit, one lowercase and one uppercase letter
_PASSWORD_RULES = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).+$")


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(CamelModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=100, pattern=r"^[A-Za-z0-9_.-]+$")
    display_name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def validate_complexity(cls, v: str) -> str:
        """Requires a digit, a lowercase and an uppercase character."""
        if not _PASSWORD_RULES.match(v):
            raise ValueError("Password must contain a digit, a lowercase and an uppercase letter")
        return v


class UserDto(CamelModel):
    """What the client stores after login: identity plus a bearer token."""
    display_name: str
    username: str
    image: Optional[str] = None
    token: str
