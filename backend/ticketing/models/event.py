"""
Event model with seat inventory tracking.

`available_seats` is denormalized so availability reads never aggregate the
bookings table. It is only ever changed by the reservation engine through a
guarded UPDATE; the CHECK constraints below are the last line of defence.
"""

import uuid

from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from ticketing.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    event_date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=False)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    image_url = Column(String(1024), nullable=False, default="")
    created_by = Column(Uuid, ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)

    bookings = relationship("Booking", back_populates="event", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("total_seats > 0", name="check_total_seats_positive"),
        CheckConstraint("available_seats >= 0", name="check_available_seats_non_negative"),
        CheckConstraint("available_seats <= total_seats", name="check_available_lte_total"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
        Index("ix_events_event_date", "event_date"),
        Index("ix_events_available_date", "available_seats", "event_date"),
    )

    @property
    def sold_out(self) -> bool:
        return self.available_seats == 0

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, available={self.available_seats}/{self.total_seats})>"
