"""
Pydantic schemas for user profiles.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from ticketing.db.base import as_utc


class ProfileUpdate(BaseModel):
    email: EmailStr
    full_name: str = Field("", max_length=255)


class ProfileResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    is_admin: bool
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
