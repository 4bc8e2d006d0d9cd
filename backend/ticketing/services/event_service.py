"""
Event store: listing, lookup and admin maintenance of events.

Seat counts are not editable here. `available_seats` starts equal to
`total_seats` on creation; after that only the reservation engine moves it.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.exceptions import ConstraintViolation, NotFound
from ticketing.core.logging import get_logger
from ticketing.db.session import guarded
from ticketing.models.booking import Booking
from ticketing.models.event import Event
from ticketing.schemas.event import EventCommand, EventCreate, EventUpdate, UpdateEvent
from ticketing.services.access_policy import Action, Principal, Resource, authorize
from ticketing.services.profile_service import ensure_profile

logger = get_logger(__name__)


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
    available_only: bool = False,
    search: Optional[str] = None,
) -> tuple[list[Event], int]:
    """
    List events ordered by date, soonest first.

    `available_only` keeps upcoming events that still have seats. `search`
    matches title, location or description, case-insensitively.
    """
    query = select(Event)
    now = datetime.now(timezone.utc)

    if upcoming_only or available_only:
        query = query.where(Event.event_date >= now)
    if available_only:
        query = query.where(Event.available_seats > 0)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(Event.title).like(pattern),
                func.lower(Event.location).like(pattern),
                func.lower(Event.description).like(pattern),
            )
        )

    async with guarded(db, "list_events"):
        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar()

        events_query = (
            query
            .order_by(Event.event_date.asc(), Event.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(events_query)
        events = list(result.scalars().all())

    return events, total


async def get_event(db: AsyncSession, event_id: uuid.UUID) -> Event:
    """Point lookup, always re-read from the database."""
    async with guarded(db, "get_event"):
        result = await db.execute(
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        event = result.scalar_one_or_none()

    if not event:
        raise NotFound("event", event_id)
    return event


async def create_event(db: AsyncSession, principal: Principal, data: EventCreate) -> Event:
    authorize(principal, Resource.EVENT, Action.CREATE)
    if data.total_seats <= 0:
        raise ConstraintViolation("total_seats must be positive")

    async with guarded(db, "create_event"):
        await ensure_profile(db, principal)
        event = Event(
            title=data.title,
            description=data.description,
            event_date=data.event_date,
            location=data.location,
            total_seats=data.total_seats,
            available_seats=data.total_seats,
            price=data.price,
            image_url=data.image_url,
            created_by=principal.user_id,
        )
        db.add(event)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConstraintViolation(f"Event rejected by store constraints: {exc.orig}") from exc
        await db.commit()

    logger.info("event_created", event_id=str(event.id), title=event.title, seats=event.total_seats)
    return event


async def update_event(
    db: AsyncSession,
    principal: Principal,
    event_id: uuid.UUID,
    changes: EventUpdate,
) -> Event:
    """Apply the fields the caller actually sent. Seat counts are not among them."""
    authorize(principal, Resource.EVENT, Action.UPDATE)
    fields = changes.model_dump(exclude_unset=True)

    async with guarded(db, "update_event"):
        result = await db.execute(
            select(Event)
            .where(Event.id == event_id)
            .execution_options(populate_existing=True)
        )
        event = result.scalar_one_or_none()
        if not event:
            raise NotFound("event", event_id)

        for name, value in fields.items():
            setattr(event, name, value)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConstraintViolation(f"Event update rejected by store constraints: {exc.orig}") from exc
        await db.commit()
        await db.refresh(event)

    logger.info("event_updated", event_id=str(event_id), fields=sorted(fields))
    return event


async def save_event(
    db: AsyncSession,
    principal: Principal,
    command: EventCommand,
) -> Event:
    """Single entry point for the admin form: create a new event or edit one."""
    if isinstance(command, UpdateEvent):
        return await update_event(db, principal, command.event_id, command.changes)
    return await create_event(db, principal, command.event)


async def delete_event(db: AsyncSession, principal: Principal, event_id: uuid.UUID) -> int:
    """Delete an event and its bookings together. Returns the number of bookings removed."""
    authorize(principal, Resource.EVENT, Action.DELETE)

    async with guarded(db, "delete_event"):
        exists = (await db.execute(select(Event.id).where(Event.id == event_id))).scalar_one_or_none()
        if exists is None:
            raise NotFound("event", event_id)

        removed = await db.execute(
            delete(Booking)
            .where(Booking.event_id == event_id)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            delete(Event)
            .where(Event.id == event_id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    logger.info("event_deleted", event_id=str(event_id), bookings_removed=removed.rowcount)
    return removed.rowcount
