"""Booking model definitions."""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, String, Text, Time, func, text
from booking_backend.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Booking(Base):
    """A customer's booking of a service with a professional."""
    __tablename__ = "bookings"
    __table_args__ = (
        # At most one live booking may start at a given time for a professional.
        Index(
            "uq_bookings_provider_slot_active",
            "provider_id",
            "booking_date",
            "booking_time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    provider_id = Column(String(36), ForeignKey("service_providers.id"), index=True, nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False)
    franchise_id = Column(String(36), index=True)
    booking_date = Column(Date, nullable=False)
    booking_time = Column(Time, nullable=False)
    duration_hours = Column(Float)
    final_price = Column(Float)
    notes = Column(Text)
    emergency_booking = Column(Boolean, default=False)
    status = Column(String, default="pending", nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
