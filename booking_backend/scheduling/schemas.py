"""Typed rows consumed and produced by availability resolution.

Rows from the store are parsed into these models right after they are fetched.
Clock fields are parsed leniently: a malformed value becomes None and the row
is later skipped instead of failing the whole request.
"""

from datetime import date, time

from pydantic import BaseModel, field_validator

from booking_backend.core.validators import parse_clock

BOOKING_STATUSES = ('pending', 'confirmed', 'in_progress', 'completed', 'cancelled')
ACTIVE_BOOKING_STATUSES = ('pending', 'confirmed', 'in_progress')
CANCELLED_STATUS = 'cancelled'


def js_weekday(day: date) -> int:
    """Day of week as stored by professionals: 0 is Sunday, 6 is Saturday."""
    return (day.weekday() + 1) % 7


class AvailabilityWindow(BaseModel):
    professional_id: str | None = None
    day_of_week: int | None = None
    start_time: time | None = None
    end_time: time | None = None
    is_emergency_available: bool = False

    class Config:
        from_attributes = True

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def parse_times(cls, value):
        return parse_clock(value)

    @field_validator('is_emergency_available', mode='before')
    @classmethod
    def default_emergency(cls, value):
        return bool(value)


class BlockedRange(BaseModel):
    professional_id: str | None = None
    blocked_date: date | None = None
    is_all_day: bool = False
    start_time: time | None = None
    end_time: time | None = None

    class Config:
        from_attributes = True

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def parse_times(cls, value):
        return parse_clock(value)

    @field_validator('is_all_day', mode='before')
    @classmethod
    def default_all_day(cls, value):
        return bool(value)


class ExistingBooking(BaseModel):
    id: str | None = None
    professional_id: str | None = None
    booking_date: date | None = None
    booking_time: time | None = None
    duration_hours: float | None = None
    status: str = 'pending'

    @field_validator('booking_time', mode='before')
    @classmethod
    def parse_booking_time(cls, value):
        return parse_clock(value)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    @property
    def is_cancelled(self) -> bool:
        return self.status == CANCELLED_STATUS


class TimeSlot(BaseModel):
    time: str
    is_available: bool = True
    is_emergency: bool = False
