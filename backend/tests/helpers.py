"""
Shared test helpers: token headers, event rows and invariant checks.
"""

from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select, update

from ticketing.core.security import create_access_token
from ticketing.models.booking import Booking, BookingStatus
from ticketing.models.event import Event
from ticketing.services.access_policy import Principal


def headers_for(principal: Principal) -> dict:
    token = create_access_token(
        data={"sub": str(principal.user_id), "is_admin": principal.is_admin, "email": principal.email}
    )
    return {"Authorization": f"Bearer {token}"}


async def make_event(
    session_factory,
    total_seats: int = 100,
    available_seats: Optional[int] = None,
    title: str = "Test Concert",
    days_ahead: int = 30,
    **fields,
) -> Event:
    event = Event(
        title=title,
        description=fields.pop("description", "A test event"),
        event_date=datetime.now(timezone.utc) + timedelta(days=days_ahead),
        location=fields.pop("location", "Test Venue"),
        total_seats=total_seats,
        available_seats=total_seats if available_seats is None else available_seats,
        price=fields.pop("price", Decimal("25.00")),
        image_url=fields.pop("image_url", ""),
        **fields,
    )
    async with session_factory() as session:
        session.add(event)
        await session.commit()
    return event


async def seat_counts(session_factory, event_id) -> tuple[int, int, int]:
    """(available, total, confirmed seats) read through a fresh session."""
    async with session_factory() as session:
        available, total = (
            await session.execute(
                select(Event.available_seats, Event.total_seats).where(Event.id == event_id)
            )
        ).one()
        booked = (
            await session.execute(
                select(func.coalesce(func.sum(Booking.seats_booked), 0)).where(
                    Booking.event_id == event_id,
                    Booking.booking_status == BookingStatus.CONFIRMED.value,
                )
            )
        ).scalar_one()
    return available, total, booked


async def assert_inventory_consistent(session_factory, event_id) -> None:
    available, total, booked = await seat_counts(session_factory, event_id)
    assert 0 <= available <= total
    assert available == total - booked


async def run(session_factory, operation, *args):
    """Call a service function in its own session, the way one request would."""
    async with session_factory() as session:
        return await operation(session, *args)


async def move_event(session_factory, event_id, days_ahead: int) -> None:
    """Reschedule an event relative to now, bypassing the service layer."""
    async with session_factory() as session:
        await session.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(event_date=datetime.now(timezone.utc) + timedelta(days=days_ahead))
        )
        await session.commit()
