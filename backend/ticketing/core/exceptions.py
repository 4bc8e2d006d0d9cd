"""
Typed errors raised by the reservation engine and the stores.

Every error carries the HTTP status it maps to and a stable machine-readable
code. The API layer renders them via `ticketing_error_handler`; services never
raise HTTPException themselves.
"""

from typing import Optional


class TicketingError(Exception):
    status_code: int = 400
    code: str = "ticketing_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(TicketingError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} {resource_id} not found")


class Forbidden(TicketingError):
    status_code = 403
    code = "forbidden"


class InvalidQuantity(TicketingError):
    status_code = 422
    code = "invalid_quantity"

    def __init__(self, seats_requested: int):
        self.seats_requested = seats_requested
        super().__init__(f"Seat quantity must be positive, got {seats_requested}")


class InsufficientSeats(TicketingError):
    status_code = 409
    code = "insufficient_seats"

    def __init__(self, event_id, requested: int, available: Optional[int] = None):
        self.event_id = event_id
        self.requested = requested
        self.available = available
        if available is None:
            message = f"Not enough seats. Requested: {requested}"
        else:
            message = f"Not enough seats. Requested: {requested}, Available: {available}"
        super().__init__(message)


class DuplicateActiveBooking(TicketingError):
    status_code = 409
    code = "duplicate_active_booking"

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__("You already have a booking for this event")


class EventClosed(TicketingError):
    """The event has already taken place; its bookings are frozen."""

    status_code = 409
    code = "event_closed"

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Event {event_id} has already taken place")


class AlreadyCancelled(TicketingError):
    """
    Soft error: the booking is already in its terminal state.

    Callers may treat it as success; the HTTP layer answers 200.
    """

    status_code = 200
    code = "already_cancelled"

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__("Booking is already cancelled")


class ConstraintViolation(TicketingError):
    status_code = 422
    code = "constraint_violation"


class StoreUnavailable(TicketingError):
    status_code = 503
    code = "store_unavailable"

    def __init__(self, message: str = "Storage temporarily unavailable, please retry"):
        super().__init__(message)
