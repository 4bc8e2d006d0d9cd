"""
Booking model: a user's claim on N seats of an event.

Key design decisions:
- Partial unique index allows one confirmed booking per (user, event) while
  keeping any number of cancelled rows as history
- Status only moves confirmed -> cancelled; rows are never deleted
"""

import enum
import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, Index, CheckConstraint, Uuid, text
from sqlalchemy.orm import relationship

from ticketing.db.base import Base, TimestampMixin


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    seats_booked = Column(Integer, nullable=False)
    booking_status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)

    user = relationship("UserProfile", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("seats_booked > 0", name="check_seats_booked_positive"),
        CheckConstraint("booking_status IN ('confirmed', 'cancelled')", name="check_booking_status"),
        Index(
            "uq_bookings_active_user_event",
            "user_id",
            "event_id",
            unique=True,
            postgresql_where=text("booking_status = 'confirmed'"),
            sqlite_where=text("booking_status = 'confirmed'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.booking_status == BookingStatus.CONFIRMED.value

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.booking_status})>"
