"""Bookable time slot generation for a single professional and date."""

import logging
from datetime import date, time
from typing import Iterable

from booking_backend.core import config
from booking_backend.core.validators import format_clock, parse_clock
from booking_backend.scheduling.schemas import (
    AvailabilityWindow,
    BlockedRange,
    ExistingBooking,
    TimeSlot,
    js_weekday,
)
from booking_backend.scheduling.store import AvailabilityStore

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
BLOCK_DEFAULT_START = time(0, 0)
BLOCK_DEFAULT_END = time(23, 59)


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_to_clock(minutes: int) -> str:
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def default_window(day: date | None = None) -> AvailabilityWindow:
    return AvailabilityWindow(
        day_of_week=js_weekday(day) if day else None,
        start_time=config.DEFAULT_AVAILABILITY_START,
        end_time=config.DEFAULT_AVAILABILITY_END,
        is_emergency_available=False,
    )


def booking_interval(
    booking: ExistingBooking,
    slot_minutes: int,
    conflict_mode: str = 'duration',
) -> tuple[int, int] | None:
    """Minutes ``[start, end)`` occupied by a booking, or None if it has no usable start."""
    if booking.booking_time is None:
        return None

    start = to_minutes(booking.booking_time)
    length = slot_minutes
    if conflict_mode == 'duration' and booking.duration_hours and booking.duration_hours > 0:
        length = max(1, round(booking.duration_hours * 60))

    return start, start + length


def is_blocked(slot_start: int, slot_end: int, blocked_ranges: Iterable[BlockedRange]) -> bool:
    for blocked in blocked_ranges:
        if blocked.is_all_day:
            return True

        blocked_start = to_minutes(blocked.start_time or BLOCK_DEFAULT_START)
        blocked_end = to_minutes(blocked.end_time or BLOCK_DEFAULT_END)
        if slot_start >= blocked_start and slot_end <= blocked_end:
            return True

    return False


def overlaps_booking(slot_start: int, slot_end: int, occupied: Iterable[tuple[int, int]]) -> bool:
    return any(slot_start < booked_end and slot_end > booked_start for booked_start, booked_end in occupied)


def generate_slots(
    day: date,
    windows: Iterable[AvailabilityWindow],
    blocked_ranges: Iterable[BlockedRange],
    bookings: Iterable[ExistingBooking],
    slot_minutes: int = 15,
    conflict_mode: str = 'duration',
) -> list[TimeSlot]:
    """Return the available slots for ``day`` in chronological order.

    Windows for other weekdays are ignored; when none remain the default
    business-hours window is used. Malformed windows and bookings are skipped.
    Only available slots are returned.
    """
    weekday = js_weekday(day)
    day_windows = [
        window for window in windows
        if window.day_of_week is None or window.day_of_week == weekday
    ]
    if not day_windows:
        day_windows = [default_window(day)]

    day_blocks = [
        blocked for blocked in blocked_ranges
        if blocked.blocked_date is None or blocked.blocked_date == day
    ]

    occupied = []
    for booking in bookings:
        if booking.is_cancelled:
            continue
        if booking.booking_date is not None and booking.booking_date != day:
            continue
        interval = booking_interval(booking, slot_minutes, conflict_mode)
        if interval is not None:
            occupied.append(interval)

    slots: dict[int, TimeSlot] = {}

    for window in day_windows:
        if window.start_time is None or window.end_time is None:
            continue

        window_start = to_minutes(window.start_time)
        window_end = to_minutes(window.end_time)
        if window_start >= window_end:
            continue

        slot_start = window_start
        while slot_start < window_end:
            slot_end = slot_start + slot_minutes
            if slot_end > window_end:
                break

            if not is_blocked(slot_start, slot_end, day_blocks) and not overlaps_booking(slot_start, slot_end, occupied):
                existing = slots.get(slot_start)
                if existing is None:
                    slots[slot_start] = TimeSlot(
                        time=minutes_to_clock(slot_start),
                        is_available=True,
                        is_emergency=window.is_emergency_available,
                    )
                elif window.is_emergency_available:
                    existing.is_emergency = True

            slot_start = slot_end

    return [slots[start] for start in sorted(slots)]


def slot_starts(slots: Iterable[TimeSlot]) -> set[str]:
    return {slot.time for slot in slots if slot.is_available}


def covered_slot_times(start_time: time, duration_minutes: int, slot_minutes: int) -> list[str]:
    """Slot start times a booking of ``duration_minutes`` at ``start_time`` would occupy."""
    start = to_minutes(start_time)
    end = min(start + max(duration_minutes, slot_minutes), MINUTES_PER_DAY)
    return [minutes_to_clock(minutes) for minutes in range(start, end, slot_minutes)]


def add_minutes(value: time, minutes: int) -> time | None:
    """Clock time ``minutes`` after ``value``, or None when that is past midnight."""
    total = to_minutes(value) + minutes
    if total >= MINUTES_PER_DAY:
        return None
    return time(total // 60, total % 60)


def format_slot_time(value) -> str | None:
    parsed = parse_clock(value)
    return format_clock(parsed) if parsed else None


def resolve_day_slots(
    store: AvailabilityStore,
    professional_id: str,
    day: date,
    slot_minutes: int | None = None,
    conflict_mode: str | None = None,
    exclude_booking_id: str | None = None,
) -> list[TimeSlot]:
    """Load a professional's rows for ``day`` from ``store`` and generate slots.

    ``exclude_booking_id`` leaves one booking out, so a booking being moved
    does not conflict with itself.
    """
    slot_minutes = slot_minutes or config.SLOT_DURATION_MINUTES
    conflict_mode = conflict_mode or config.BOOKING_CONFLICT_MODE

    windows = store.list_windows(professional_id, js_weekday(day))
    if not store.schema.has_availability_table:
        logger.info('Availability table missing, using default hours for professional %s', professional_id)
    elif not windows:
        logger.info('No availability configured for professional %s on %s, using default hours', professional_id, day)

    blocked_ranges = store.list_blocked_ranges(professional_id, day)
    bookings = [
        booking for booking in store.list_bookings(professional_id, day)
        if exclude_booking_id is None or booking.id != exclude_booking_id
    ]

    return generate_slots(
        day,
        windows,
        blocked_ranges,
        bookings,
        slot_minutes=slot_minutes,
        conflict_mode=conflict_mode,
    )
