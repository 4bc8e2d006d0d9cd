from ticketing.models.profile import UserProfile
from ticketing.models.event import Event
from ticketing.models.booking import Booking, BookingStatus

__all__ = ["UserProfile", "Event", "Booking", "BookingStatus"]
