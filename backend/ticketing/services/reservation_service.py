"""
Reservation engine: the only code that changes an event's seat counters.

CONCURRENCY STRATEGY: Guarded Conditional Updates
=================================================

Problem:
  Two users try to book the last seat simultaneously.
  Both read available_seats=1, both decrement to 0, both succeed.
  Result: Overbooking.

Solution:
  The seat counter is never read, adjusted in Python and written back.
  Every change is a single UPDATE whose WHERE clause carries the guard:

    reserve:  UPDATE events SET available_seats = available_seats - :k
              WHERE id = :event_id AND event_date >= :now
                AND available_seats >= :k

    cancel:   UPDATE bookings SET booking_status = 'cancelled'
              WHERE id = :booking_id AND booking_status = 'confirmed'
              -- and only if that touched a row:
              UPDATE events SET available_seats = available_seats + :k
              WHERE id = :event_id AND available_seats + :k <= total_seats

  The database serialises writers on the event row, so the guard is always
  evaluated against the latest committed value. Zero affected rows means
  the guard failed; the transaction is rolled back and nothing is left
  half-applied. No retry loop is needed: a failed guard is a real answer,
  not a version conflict.

  The booking insert (or status flip) and the seat update share one
  transaction, so nobody can observe one without the other. The CHECK
  constraints on the events table are the final safety net.

  Cancellation is idempotent on the status edge: only the request that
  moves a booking from confirmed to cancelled releases seats. Repeats get
  AlreadyCancelled and change nothing.

  Events that have already taken place are closed: reserving seats on them
  or cancelling a confirmed booking for them raises EventClosed.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.exceptions import (
    AlreadyCancelled,
    ConstraintViolation,
    DuplicateActiveBooking,
    EventClosed,
    InsufficientSeats,
    InvalidQuantity,
    NotFound,
    TicketingError,
)
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_cancellation, record_reservation, reservation_latency
from ticketing.db.base import as_utc, utcnow
from ticketing.db.session import guarded
from ticketing.models.booking import Booking, BookingStatus
from ticketing.models.event import Event
from ticketing.services.access_policy import Action, Principal, Resource, authorize
from ticketing.services.booking_service import find_active_booking
from ticketing.services.profile_service import ensure_profile

logger = get_logger(__name__)


@dataclass(frozen=True)
class Availability:
    event_id: uuid.UUID
    available_seats: int
    total_seats: int

    @property
    def sold_out(self) -> bool:
        return self.available_seats == 0


async def _read_seats(db: AsyncSession, event_id: uuid.UUID):
    result = await db.execute(
        select(Event.available_seats, Event.total_seats, Event.event_date).where(Event.id == event_id)
    )
    return result.one_or_none()


def _has_taken_place(event_date: datetime, now: datetime) -> bool:
    return as_utc(event_date) < now


async def reserve(
    db: AsyncSession,
    principal: Principal,
    event_id: uuid.UUID,
    seats_requested: int,
) -> Booking:
    """
    Book seats for the principal.

    Raises InvalidQuantity, Forbidden, NotFound, EventClosed,
    DuplicateActiveBooking or InsufficientSeats. On any failure the event's seat count is untouched.
    """
    start = time.perf_counter()
    try:
        booking = await _reserve(db, principal, event_id, seats_requested)
    except TicketingError as exc:
        record_reservation(exc.code)
        raise
    except Exception:
        record_reservation("error")
        raise
    finally:
        reservation_latency.observe(time.perf_counter() - start)

    record_reservation("success")
    return booking


async def _reserve(
    db: AsyncSession,
    principal: Principal,
    event_id: uuid.UUID,
    seats_requested: int,
) -> Booking:
    if seats_requested <= 0:
        raise InvalidQuantity(seats_requested)
    authorize(principal, Resource.BOOKING, Action.CREATE, owner_id=principal.user_id)

    now = utcnow()
    async with guarded(db, "reserve"):
        seats = await _read_seats(db, event_id)
        if seats is None:
            raise NotFound("event", event_id)
        if _has_taken_place(seats.event_date, now):
            raise EventClosed(event_id)

        if await find_active_booking(db, principal.user_id, event_id):
            raise DuplicateActiveBooking(event_id)

        await ensure_profile(db, principal)

        decrement = await db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.event_date >= now,
                Event.available_seats >= seats_requested,
            )
            .values(available_seats=Event.available_seats - seats_requested)
            .execution_options(synchronize_session=False)
        )

        if decrement.rowcount == 0:
            current = await _read_seats(db, event_id)
            if current is None:
                raise NotFound("event", event_id)
            if _has_taken_place(current.event_date, now):
                raise EventClosed(event_id)
            logger.warning(
                "reservation_rejected_no_seats",
                event_id=str(event_id),
                user_id=str(principal.user_id),
                requested=seats_requested,
                available=current.available_seats,
            )
            raise InsufficientSeats(event_id, seats_requested, current.available_seats)

        booking = Booking(
            user_id=principal.user_id,
            event_id=event_id,
            seats_booked=seats_requested,
            booking_status=BookingStatus.CONFIRMED.value,
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError as exc:
            # Same user racing themselves; the partial unique index caught it
            logger.info("reservation_rejected_duplicate", event_id=str(event_id), user_id=str(principal.user_id))
            raise DuplicateActiveBooking(event_id) from exc

        await db.commit()

    logger.info(
        "booking_created",
        booking_id=str(booking.id),
        user_id=str(principal.user_id),
        event_id=str(event_id),
        seats=seats_requested,
    )
    return booking


async def cancel(db: AsyncSession, principal: Principal, booking_id: uuid.UUID) -> Booking:
    """
    Cancel a booking and return its seats to the event, exactly once.

    Raises NotFound, Forbidden, EventClosed when the event is over, or
    AlreadyCancelled when the booking had already reached its terminal state
    (callers may treat that as success).
    """
    try:
        booking, released = await _cancel(db, principal, booking_id)
    except TicketingError as exc:
        record_cancellation(exc.code)
        raise
    except Exception:
        record_cancellation("error")
        raise

    record_cancellation("success", seats=released)
    return booking


async def _cancel(db: AsyncSession, principal: Principal, booking_id: uuid.UUID) -> tuple[Booking, int]:
    async with guarded(db, "cancel"):
        row = (
            await db.execute(
                select(
                    Booking.user_id,
                    Booking.event_id,
                    Booking.seats_booked,
                    Booking.booking_status,
                    Event.event_date,
                )
                .join(Event, Event.id == Booking.event_id)
                .where(Booking.id == booking_id)
            )
        ).one_or_none()
        if row is None:
            raise NotFound("booking", booking_id)

        authorize(principal, Resource.BOOKING, Action.CANCEL, owner_id=row.user_id)

        # Past events keep their bookings; repeats still answer AlreadyCancelled
        if row.booking_status == BookingStatus.CONFIRMED.value and _has_taken_place(row.event_date, utcnow()):
            raise EventClosed(row.event_id)

        flipped = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.booking_status == BookingStatus.CONFIRMED.value,
            )
            .values(booking_status=BookingStatus.CANCELLED.value)
            .execution_options(synchronize_session=False)
        )
        if flipped.rowcount == 0:
            logger.info("cancel_repeated", booking_id=str(booking_id), user_id=str(principal.user_id))
            raise AlreadyCancelled(booking_id)

        restored = await db.execute(
            update(Event)
            .where(
                Event.id == row.event_id,
                Event.available_seats + row.seats_booked <= Event.total_seats,
            )
            .values(available_seats=Event.available_seats + row.seats_booked)
            .execution_options(synchronize_session=False)
        )
        if restored.rowcount == 0:
            logger.error(
                "seat_restore_out_of_bounds",
                booking_id=str(booking_id),
                event_id=str(row.event_id),
                seats=row.seats_booked,
            )
            raise ConstraintViolation("Releasing these seats would exceed the event's capacity")

        await db.commit()

        booking = (
            await db.execute(
                select(Booking)
                .where(Booking.id == booking_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

    logger.info(
        "booking_cancelled",
        booking_id=str(booking_id),
        user_id=str(row.user_id),
        cancelled_by=str(principal.user_id),
        event_id=str(row.event_id),
        seats_restored=row.seats_booked,
    )
    return booking, row.seats_booked


async def get_availability(
    db: AsyncSession,
    event_id: uuid.UUID,
    principal: Optional[Principal] = None,
) -> Availability:
    """Latest committed seat counts. Never served from cache. Public read."""
    authorize(principal, Resource.EVENT, Action.READ)
    async with guarded(db, "get_availability"):
        seats = await _read_seats(db, event_id)

    if seats is None:
        raise NotFound("event", event_id)
    return Availability(event_id=event_id, available_seats=seats.available_seats, total_seats=seats.total_seats)


async def resize_capacity(
    db: AsyncSession,
    principal: Principal,
    event_id: uuid.UUID,
    total_seats: int,
) -> Event:
    """
    Change an event's capacity. Both counters shift by the same delta in one
    guarded statement, so seats held by confirmed bookings are preserved.
    Shrinking below the seats already booked is a ConstraintViolation.
    """
    authorize(principal, Resource.EVENT, Action.UPDATE)
    if total_seats <= 0:
        raise ConstraintViolation("total_seats must be positive")

    async with guarded(db, "resize_capacity"):
        delta = total_seats - Event.total_seats
        resized = await db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                Event.available_seats + delta >= 0,
            )
            .values(total_seats=total_seats, available_seats=Event.available_seats + delta)
            .execution_options(synchronize_session=False)
        )
        if resized.rowcount == 0:
            current = await _read_seats(db, event_id)
            if current is None:
                raise NotFound("event", event_id)
            booked = current.total_seats - current.available_seats
            raise ConstraintViolation(
                f"Cannot shrink capacity to {total_seats}: {booked} seats are already booked"
            )
        await db.commit()

        event = (
            await db.execute(
                select(Event)
                .where(Event.id == event_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one()

    logger.info("event_capacity_changed", event_id=str(event_id), total_seats=total_seats)
    return event
