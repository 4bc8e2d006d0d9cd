"""
Event endpoints. Listing pages are cached in Redis; single events and
availability always read the database.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.config import get_settings
from ticketing.core.logging import get_logger
from ticketing.core.security import get_current_principal
from ticketing.db.session import get_db
from ticketing.schemas.event import (
    AvailabilityResponse,
    CapacityUpdate,
    CreateEvent,
    EventCreate,
    EventListResponse,
    EventResponse,
    EventUpdate,
    UpdateEvent,
)
from ticketing.services.access_policy import Principal
from ticketing.services.cache_service import (
    get_cached_listing,
    invalidate_event_cache,
    make_listing_key,
    set_cached_listing,
)
from ticketing.services.event_service import delete_event, get_event, list_events, save_event
from ticketing.services.reservation_service import get_availability, resize_capacity

logger = get_logger(__name__)
settings = get_settings()
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    upcoming_only: bool = Query(True),
    available_only: bool = Query(False),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events by date, soonest first.
    Pages are cached; any booking or event change invalidates them.
    """
    key = make_listing_key(page, page_size, upcoming_only, available_only, search)
    cached = await get_cached_listing(key)
    if cached:
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, upcoming_only, available_only, search)
    response = EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=total,
        page=page,
        page_size=page_size,
    )
    await set_cached_listing(key, response.model_dump(mode="json"))
    return response


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await get_event(db, event_id)


@router.get("/{event_id}/availability", response_model=AvailabilityResponse)
async def availability_endpoint(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    availability = await get_availability(db, event_id)
    return AvailabilityResponse(
        event_id=availability.event_id,
        available_seats=availability.available_seats,
        total_seats=availability.total_seats,
        sold_out=availability.sold_out,
    )


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create an event with every seat available. Admin only."""
    event = await save_event(db, principal, CreateEvent(event=event_data))
    await invalidate_event_cache()
    return event


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: uuid.UUID,
    changes: EventUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Edit descriptive fields. Admin only."""
    event = await save_event(db, principal, UpdateEvent(event_id=event_id, changes=changes))
    await invalidate_event_cache()
    return event


@router.put("/{event_id}/capacity", response_model=EventResponse)
async def resize_capacity_endpoint(
    event_id: uuid.UUID,
    capacity: CapacityUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Change total seats, keeping booked seats booked. Admin only."""
    event = await resize_capacity(db, principal, event_id, capacity.total_seats)
    await invalidate_event_cache()
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_endpoint(
    event_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event together with its bookings. Admin only."""
    await delete_event(db, principal, event_id)
    await invalidate_event_cache()
