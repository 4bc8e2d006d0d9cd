"""
Event store tests at the service layer: constraint failures roll back in full,
and sample data seeding.
"""

from datetime import datetime, timezone, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from ticketing.core.exceptions import ConstraintViolation
from ticketing.db.seed import SAMPLE_EVENTS, seed_sample_events
from ticketing.models.event import Event
from ticketing.schemas.event import CreateEvent, EventCreate, EventUpdate, UpdateEvent
from ticketing.services.event_service import create_event, list_events, save_event, update_event

from helpers import run


def unchecked_event(**overrides) -> EventCreate:
    """An EventCreate that skips field validation, as a buggy caller could build."""
    fields = {
        "title": "Unchecked",
        "description": "",
        "event_date": datetime.now(timezone.utc) + timedelta(days=10),
        "location": "Somewhere",
        "total_seats": 10,
        "price": Decimal("5.00"),
        "image_url": "",
    }
    fields.update(overrides)
    return EventCreate.model_construct(**fields)


async def event_count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(Event))).scalar()


async def stored_title(session_factory, event_id) -> str:
    async with session_factory() as session:
        return (await session.execute(select(Event.title).where(Event.id == event_id))).scalar_one()


@pytest.mark.asyncio
async def test_create_event_with_zero_seats_rejected(session_factory, admin):
    with pytest.raises(ConstraintViolation):
        await run(session_factory, create_event, admin, unchecked_event(total_seats=0))

    assert await event_count(session_factory) == 0


@pytest.mark.asyncio
async def test_create_event_rejected_by_table_check(session_factory, admin):
    with pytest.raises(ConstraintViolation):
        await run(session_factory, create_event, admin, unchecked_event(price=Decimal("-1.00")))

    assert await event_count(session_factory) == 0


@pytest.mark.asyncio
async def test_update_event_null_title_leaves_row_unchanged(session_factory, admin, test_event):
    changes = EventUpdate(title=None, location="Moved Venue")

    with pytest.raises(ConstraintViolation):
        await run(session_factory, update_event, admin, test_event.id, changes)

    assert await stored_title(session_factory, test_event.id) == "Test Concert"
    async with session_factory() as session:
        location = (
            await session.execute(select(Event.location).where(Event.id == test_event.id))
        ).scalar_one()
    assert location == "Test Venue"


@pytest.mark.asyncio
async def test_save_event_dispatches_commands(session_factory, admin):
    created = await run(
        session_factory,
        save_event,
        admin,
        CreateEvent(event=unchecked_event(title="Draft")),
    )
    assert created.available_seats == created.total_seats == 10

    edited = await run(
        session_factory,
        save_event,
        admin,
        UpdateEvent(event_id=created.id, changes=EventUpdate(title="Final")),
    )
    assert edited.id == created.id
    assert await stored_title(session_factory, created.id) == "Final"


@pytest.mark.asyncio
async def test_seed_sample_events_once(session_factory):
    assert await run(session_factory, seed_sample_events) == len(SAMPLE_EVENTS)
    assert await run(session_factory, seed_sample_events) == 0

    events, total = await run(session_factory, list_events)
    assert total == len(SAMPLE_EVENTS)
    assert all(e.available_seats == e.total_seats for e in events)
