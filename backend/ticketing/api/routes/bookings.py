"""
Booking endpoints: reserve, cancel and list.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.exceptions import AlreadyCancelled
from ticketing.core.logging import get_logger
from ticketing.core.security import get_current_principal
from ticketing.db.session import get_db
from ticketing.models.booking import BookingStatus
from ticketing.schemas.booking import (
    BookingCancelResponse,
    BookingCreate,
    BookingResponse,
    BookingWithEventResponse,
)
from ticketing.services.access_policy import Principal
from ticketing.services.booking_service import get_booking, list_all_bookings, list_user_bookings
from ticketing.services.cache_service import invalidate_event_cache
from ticketing.services.reservation_service import cancel, reserve

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Reserve seats for an event.

    The seat decrement is a single guarded UPDATE, so concurrent requests for
    the last seats cannot overbook. A 409 means there were not enough seats
    at commit time or the caller already holds a booking for this event.
    """
    booking = await reserve(db, principal, booking_data.event_id, booking_data.seats_booked)
    await invalidate_event_cache()
    return booking


@router.delete("/{booking_id}", response_model=BookingCancelResponse)
async def cancel_booking_endpoint(
    booking_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Cancel a booking and release its seats. Safe to retry: repeating the call
    answers 200 with `already_cancelled` set and releases nothing.
    """
    try:
        booking = await cancel(db, principal, booking_id)
    except AlreadyCancelled as exc:
        return BookingCancelResponse(
            message=exc.message,
            booking_id=exc.booking_id,
            booking_status=BookingStatus.CANCELLED.value,
            already_cancelled=True,
        )

    await invalidate_event_cache()
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking_id=booking.id,
        booking_status=booking.booking_status,
        seats_released=booking.seats_booked,
    )


@router.get("/", response_model=list[BookingWithEventResponse])
async def list_own_bookings(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """The caller's bookings, newest first, with event details."""
    return await list_user_bookings(db, principal)


@router.get("/all", response_model=list[BookingWithEventResponse])
async def list_every_booking(
    event_id: Optional[uuid.UUID] = Query(None),
    booking_status: Optional[BookingStatus] = Query(None),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """All bookings, optionally for one event or status. Admin only."""
    return await list_all_bookings(db, principal, event_id, booking_status)


@router.get("/{booking_id}", response_model=BookingWithEventResponse)
async def get_booking_endpoint(
    booking_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, principal, booking_id)
