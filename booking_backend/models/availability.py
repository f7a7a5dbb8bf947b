"""Professional availability model definitions."""

from sqlalchemy import Boolean, Column, Date, Integer, String, Time
from booking_backend.database import AVAILABILITY_TABLE, BLOCKED_DATES_TABLE, Base


class ProfessionalAvailability(Base):
    """A weekly recurring window in which a professional accepts bookings."""
    __tablename__ = AVAILABILITY_TABLE

    id = Column(Integer, primary_key=True)
    professional_id = Column(String(36), index=True, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Time)
    end_time = Column(Time)
    is_available = Column(Boolean, default=True)
    is_emergency_available = Column(Boolean, default=False)


class ProfessionalBlockedDate(Base):
    """A date, or part of one, on which a professional cannot be booked."""
    __tablename__ = BLOCKED_DATES_TABLE

    id = Column(Integer, primary_key=True)
    professional_id = Column(String(36), index=True, nullable=False)
    blocked_date = Column(Date, nullable=False)
    is_all_day = Column(Boolean, default=False)
    start_time = Column(Time)
    end_time = Column(Time)
    reason = Column(String)
