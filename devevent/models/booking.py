"""
Booking model
"""

from sqlalchemy import Column, String, DateTime

from devevent.core.db import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True)
    # Plain indexed column, not a foreign key: deleting an event leaves its bookings in place
    event_id = Column(String(32), nullable=False, index=True)
    email = Column(String(320), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
