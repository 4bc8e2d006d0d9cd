"""
Pydantic schemas for event requests, responses and admin commands.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ticketing.db.base import as_utc


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    event_date: datetime
    location: str = Field(..., min_length=1, max_length=255)
    total_seats: int = Field(..., gt=0, le=1_000_000)
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    image_url: str = Field("", max_length=1024)

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class EventUpdate(BaseModel):
    """Editable fields. Seat counts go through the capacity endpoint instead."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1024)

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    model_config = {"extra": "forbid"}


class CapacityUpdate(BaseModel):
    total_seats: int = Field(..., gt=0, le=1_000_000)


class CreateEvent(BaseModel):
    kind: Literal["create"] = "create"
    event: EventCreate


class UpdateEvent(BaseModel):
    kind: Literal["update"] = "update"
    event_id: uuid.UUID
    changes: EventUpdate


# The admin form submits either a new event or an edit of an existing one
EventCommand = Annotated[Union[CreateEvent, UpdateEvent], Field(discriminator="kind")]


class EventResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    event_date: datetime
    location: str
    total_seats: int
    available_seats: int
    price: Decimal
    image_url: str
    sold_out: bool
    created_by: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("event_date", "created_at", "updated_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False


class AvailabilityResponse(BaseModel):
    event_id: uuid.UUID
    available_seats: int
    total_seats: int
    sold_out: bool
