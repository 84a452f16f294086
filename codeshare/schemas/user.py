"""
Pydantic schemas for the profile endpoints.

hashed_password is never part of any response schema.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class UserProfileResponse(BaseModel):
    id: int
    uuid: str
    username: str
    email: str | None = None
    phone: str | None = None  # masked, e.g. 138****8000
    role: str
    real_name: str | None = None
    gender: str | None = None
    birth_date: date | None = None
    avatar_url: str | None = None
    created_at: datetime


class UserProfileUpdate(BaseModel):
    """
    Request body for PATCH /users/me.

    Every field is optional. Omitted, null and blank fields are left alone.
    birth_date stays a string here so the service can report a bad date as
    a 400 with its own message.
    """
    username: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)
    real_name: str | None = Field(default=None, max_length=50)
    gender: str | None = None
    birth_date: str | None = None
