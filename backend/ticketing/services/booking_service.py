"""
Booking ledger: lookups over the bookings table.

All writes to bookings happen in the reservation engine, in the same
transaction as the matching seat update.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ticketing.core.exceptions import NotFound
from ticketing.db.session import guarded
from ticketing.models.booking import Booking, BookingStatus
from ticketing.services.access_policy import Action, Principal, Resource, authorize


async def find_active_booking(
    db: AsyncSession,
    user_id: uuid.UUID,
    event_id: uuid.UUID,
) -> Optional[Booking]:
    """The user's confirmed booking on the event, if any. Runs in the caller's transaction."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.user_id == user_id,
            Booking.event_id == event_id,
            Booking.booking_status == BookingStatus.CONFIRMED.value,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_booking(db: AsyncSession, principal: Principal, booking_id: uuid.UUID) -> Booking:
    async with guarded(db, "get_booking"):
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.event))
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()

    if not booking:
        raise NotFound("booking", booking_id)
    authorize(principal, Resource.BOOKING, Action.READ, owner_id=booking.user_id)
    return booking


async def list_user_bookings(
    db: AsyncSession,
    principal: Principal,
    user_id: Optional[uuid.UUID] = None,
) -> list[Booking]:
    """A user's bookings, newest first, each with its event loaded."""
    target = user_id or principal.user_id
    authorize(principal, Resource.BOOKING, Action.READ, owner_id=target)

    async with guarded(db, "list_user_bookings"):
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == target)
            .options(selectinload(Booking.event))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())


async def list_all_bookings(
    db: AsyncSession,
    principal: Principal,
    event_id: Optional[uuid.UUID] = None,
    status: Optional[BookingStatus] = None,
) -> list[Booking]:
    """Every booking in the ledger, optionally narrowed to one event or status. Admin only."""
    authorize(principal, Resource.BOOKING, Action.LIST_ALL)

    query = select(Booking).options(selectinload(Booking.event))
    if event_id is not None:
        query = query.where(Booking.event_id == event_id)
    if status is not None:
        query = query.where(Booking.booking_status == status.value)

    async with guarded(db, "list_all_bookings"):
        result = await db.execute(
            query
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
