"""
User profile keyed by the identity provider's subject id.
"""

import uuid

from sqlalchemy import Column, String, Boolean, Uuid
from sqlalchemy.orm import relationship

from ticketing.db.base import Base, TimestampMixin


class UserProfile(Base, TimestampMixin):
    __tablename__ = "user_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(255), nullable=False, default="")
    is_admin = Column(Boolean, nullable=False, default=False)

    bookings = relationship("Booking", back_populates="user", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, email={self.email}, admin={self.is_admin})>"
