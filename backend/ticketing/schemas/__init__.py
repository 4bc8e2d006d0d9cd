from ticketing.schemas.profile import ProfileUpdate, ProfileResponse
from ticketing.schemas.event import (
    EventCreate, EventUpdate, CapacityUpdate, CreateEvent, UpdateEvent, EventCommand,
    EventResponse, EventListResponse, AvailabilityResponse,
)
from ticketing.schemas.booking import (
    BookingCreate, BookingResponse, BookingWithEventResponse, BookingCancelResponse,
)

__all__ = [
    "ProfileUpdate", "ProfileResponse",
    "EventCreate", "EventUpdate", "CapacityUpdate", "CreateEvent", "UpdateEvent", "EventCommand",
    "EventResponse", "EventListResponse", "AvailabilityResponse",
    "BookingCreate", "BookingResponse", "BookingWithEventResponse", "BookingCancelResponse",
]
