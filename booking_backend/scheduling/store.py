"""Read access to availability windows, blocked dates and bookings."""

from datetime import date
from typing import Collection, Iterable, Protocol

from sqlalchemy.orm import Session

from booking_backend.database import OptionalSchema
from booking_backend.models.availability import ProfessionalAvailability, ProfessionalBlockedDate
from booking_backend.models.booking import Booking
from booking_backend.scheduling.schemas import (
    CANCELLED_STATUS,
    AvailabilityWindow,
    BlockedRange,
    ExistingBooking,
)


class AvailabilityStore(Protocol):
    schema: OptionalSchema

    def list_windows(self, professional_id: str, day_of_week: int) -> list[AvailabilityWindow]:
        ...

    def list_blocked_ranges(self, professional_id: str, day: date) -> list[BlockedRange]:
        ...

    def list_bookings(
        self,
        professional_id: str,
        day: date,
        statuses: Collection[str] | None = None,
    ) -> list[ExistingBooking]:
        ...


def booking_from_row(row: Booking) -> ExistingBooking:
    return ExistingBooking(
        id=row.id,
        professional_id=row.provider_id,
        booking_date=row.booking_date,
        booking_time=row.booking_time,
        duration_hours=row.duration_hours,
        status=row.status,
    )


class SqlAlchemyAvailabilityStore:
    """Store backed by the application database.

    Optional tables reported missing by ``schema`` are never queried; reads
    from them return no rows.
    """

    def __init__(self, db: Session, schema: OptionalSchema):
        self.db = db
        self.schema = schema

    def list_windows(self, professional_id: str, day_of_week: int) -> list[AvailabilityWindow]:
        if not self.schema.has_availability_table:
            return []

        rows = self.db.query(ProfessionalAvailability).filter(
            ProfessionalAvailability.professional_id == professional_id,
            ProfessionalAvailability.day_of_week == day_of_week,
            ProfessionalAvailability.is_available.is_(True),
        ).order_by(ProfessionalAvailability.start_time.asc()).all()

        return [AvailabilityWindow.model_validate(row) for row in rows]

    def list_blocked_ranges(self, professional_id: str, day: date) -> list[BlockedRange]:
        if not self.schema.has_blocked_dates_table:
            return []

        rows = self.db.query(ProfessionalBlockedDate).filter(
            ProfessionalBlockedDate.professional_id == professional_id,
            ProfessionalBlockedDate.blocked_date == day,
        ).all()

        return [BlockedRange.model_validate(row) for row in rows]

    def list_bookings(
        self,
        professional_id: str,
        day: date,
        statuses: Collection[str] | None = None,
    ) -> list[ExistingBooking]:
        query = self.db.query(Booking).filter(
            Booking.provider_id == professional_id,
            Booking.booking_date == day,
        )
        if statuses is None:
            query = query.filter(Booking.status != CANCELLED_STATUS)
        else:
            query = query.filter(Booking.status.in_(list(statuses)))

        rows = query.order_by(Booking.booking_time.asc()).all()
        return [booking_from_row(row) for row in rows]


class InMemoryAvailabilityStore:
    def __init__(
        self,
        windows: Iterable[AvailabilityWindow] = (),
        blocked_ranges: Iterable[BlockedRange] = (),
        bookings: Iterable[ExistingBooking] = (),
        schema: OptionalSchema | None = None,
    ):
        self.windows = list(windows)
        self.blocked_ranges = list(blocked_ranges)
        self.bookings = list(bookings)
        self.schema = schema or OptionalSchema()

    def list_windows(self, professional_id: str, day_of_week: int) -> list[AvailabilityWindow]:
        if not self.schema.has_availability_table:
            return []
        return [
            window for window in self.windows
            if window.professional_id == professional_id and window.day_of_week == day_of_week
        ]

    def list_blocked_ranges(self, professional_id: str, day: date) -> list[BlockedRange]:
        if not self.schema.has_blocked_dates_table:
            return []
        return [
            blocked for blocked in self.blocked_ranges
            if blocked.professional_id == professional_id and blocked.blocked_date == day
        ]

    def list_bookings(
        self,
        professional_id: str,
        day: date,
        statuses: Collection[str] | None = None,
    ) -> list[ExistingBooking]:
        matches = []
        for booking in self.bookings:
            if booking.professional_id != professional_id or booking.booking_date != day:
                continue
            if statuses is None and booking.is_cancelled:
                continue
            if statuses is not None and booking.status not in statuses:
                continue
            matches.append(booking)

        return sorted(matches, key=lambda booking: (booking.booking_time is None, booking.booking_time or 0))
