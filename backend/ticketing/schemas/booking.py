"""
Pydantic schemas for booking requests and responses.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator

from ticketing.db.base import as_utc
from ticketing.schemas.event import EventResponse


class BookingCreate(BaseModel):
    event_id: uuid.UUID
    # Quantity is validated by the reservation engine (InvalidQuantity)
    seats_booked: int = 1


class BookingResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    seats_booked: int
    booking_status: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class BookingWithEventResponse(BookingResponse):
    event: EventResponse


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: uuid.UUID
    booking_status: str
    already_cancelled: bool = False
    seats_released: int = 0
