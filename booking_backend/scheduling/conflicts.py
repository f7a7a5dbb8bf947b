"""Booking conflict checks used before a booking is created or moved."""

from datetime import date, time
from typing import Iterable

from booking_backend.scheduling.schemas import ACTIVE_BOOKING_STATUSES, ExistingBooking, TimeSlot
from booking_backend.scheduling.slots import covered_slot_times, slot_starts
from booking_backend.scheduling.store import AvailabilityStore


def find_conflicts(
    bookings: Iterable[ExistingBooking],
    start_time: time,
    end_time: time | None,
    exclude_booking_id: str | None = None,
) -> list[ExistingBooking]:
    """Active bookings whose start falls within ``[start_time, end_time)``.

    An ``end_time`` of None runs to the end of the day.
    """
    conflicts = []
    for booking in bookings:
        if not booking.is_active or booking.booking_time is None:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        if booking.booking_time < start_time:
            continue
        if end_time is None or booking.booking_time < end_time:
            conflicts.append(booking)

    return sorted(conflicts, key=lambda booking: booking.booking_time)


def check_conflicts(
    store: AvailabilityStore,
    professional_id: str,
    day: date,
    start_time: time,
    end_time: time | None,
    exclude_booking_id: str | None = None,
) -> list[ExistingBooking]:
    bookings = store.list_bookings(professional_id, day, statuses=ACTIVE_BOOKING_STATUSES)
    return find_conflicts(bookings, start_time, end_time, exclude_booking_id=exclude_booking_id)


def has_conflict(
    store: AvailabilityStore,
    professional_id: str,
    day: date,
    start_time: time,
    end_time: time | None,
    exclude_booking_id: str | None = None,
) -> bool:
    """Whether any active booking starts in ``[start_time, end_time)``. Checked before every insert or move."""
    conflicts = check_conflicts(store, professional_id, day, start_time, end_time, exclude_booking_id=exclude_booking_id)
    return bool(conflicts)


def booking_window_is_open(
    slots: Iterable[TimeSlot],
    start_time: time,
    duration_minutes: int,
    slot_minutes: int,
) -> bool:
    """True when every slot a booking would cover is currently offered."""
    available = slot_starts(slots)
    return all(
        slot_time in available
        for slot_time in covered_slot_times(start_time, duration_minutes, slot_minutes)
    )
