from datetime import date, time

import pytest

from booking_backend.scheduling.conflicts import (
    booking_window_is_open,
    check_conflicts,
    find_conflicts,
    has_conflict,
)
from booking_backend.scheduling.schemas import ExistingBooking, TimeSlot
from booking_backend.scheduling.store import InMemoryAvailabilityStore

MONDAY = date(2026, 1, 5)
PROFESSIONAL_ID = '3f2b8c1e-5d4a-4e6b-9c7d-1a2b3c4d5e6f'


def booking(booking_id, at, status='pending', day=MONDAY, professional_id=PROFESSIONAL_ID) -> ExistingBooking:
    return ExistingBooking(
        id=booking_id,
        professional_id=professional_id,
        booking_date=day,
        booking_time=at,
        status=status,
    )


def test_pending_booking_at_start_time_conflicts() -> None:
    conflicts = find_conflicts([booking('b-1', '10:00')], time(10, 0), time(10, 30))

    assert [conflict.id for conflict in conflicts] == ['b-1']


def test_booking_at_end_time_does_not_conflict() -> None:
    assert find_conflicts([booking('b-1', '10:30')], time(10, 0), time(10, 30)) == []


def test_booking_before_range_does_not_conflict() -> None:
    assert find_conflicts([booking('b-1', '09:45')], time(10, 0), time(10, 30)) == []


@pytest.mark.parametrize('status', ['pending', 'confirmed', 'in_progress'])
def test_active_statuses_conflict(status: str) -> None:
    assert find_conflicts([booking('b-1', '10:15', status=status)], time(10, 0), time(10, 30))


@pytest.mark.parametrize('status', ['completed', 'cancelled'])
def test_finished_statuses_never_conflict(status: str) -> None:
    assert find_conflicts([booking('b-1', '10:15', status=status)], time(10, 0), time(10, 30)) == []


def test_open_ended_range_runs_to_end_of_day() -> None:
    conflicts = find_conflicts([booking('b-1', '23:30')], time(23, 0), None)

    assert len(conflicts) == 1


def test_excluded_booking_is_ignored() -> None:
    bookings = [booking('b-1', '10:00'), booking('b-2', '10:15')]

    conflicts = find_conflicts(bookings, time(10, 0), time(11, 0), exclude_booking_id='b-1')

    assert [conflict.id for conflict in conflicts] == ['b-2']


def test_conflicts_are_returned_in_time_order() -> None:
    bookings = [booking('late', '10:45'), booking('early', '10:00')]

    conflicts = find_conflicts(bookings, time(10, 0), time(11, 0))

    assert [conflict.id for conflict in conflicts] == ['early', 'late']


def test_check_conflicts_only_reads_the_requested_professional_and_day() -> None:
    store = InMemoryAvailabilityStore(bookings=[
        booking('same', '10:00'),
        booking('other-day', '10:00', day=date(2026, 1, 6)),
        booking('other-pro', '10:00', professional_id='9b1d2c3e-4f5a-4b6c-8d7e-0f1a2b3c4d5e'),
    ])

    conflicts = check_conflicts(store, PROFESSIONAL_ID, MONDAY, time(10, 0), time(10, 30))

    assert [conflict.id for conflict in conflicts] == ['same']


def test_has_conflict_reports_boolean() -> None:
    store = InMemoryAvailabilityStore(bookings=[booking('b-1', '10:00', status='confirmed')])

    assert has_conflict(store, PROFESSIONAL_ID, MONDAY, time(10, 0), time(10, 30)) is True
    assert has_conflict(store, PROFESSIONAL_ID, MONDAY, time(11, 0), time(11, 30)) is False


def test_booking_window_is_open_requires_every_covered_slot() -> None:
    slots = [TimeSlot(time='10:00'), TimeSlot(time='10:15'), TimeSlot(time='10:45')]

    assert booking_window_is_open(slots, time(10, 0), 30, 15) is True
    assert booking_window_is_open(slots, time(10, 0), 60, 15) is False
    assert booking_window_is_open(slots, time(10, 5), 15, 15) is False


def test_has_conflict_ignores_excluded_booking_and_runs_open_ended() -> None:
    store = InMemoryAvailabilityStore(bookings=[booking('moving', '10:00'), booking('late', '23:30')])

    assert has_conflict(store, PROFESSIONAL_ID, MONDAY, time(10, 0), time(11, 0), exclude_booking_id='moving') is False
    assert has_conflict(store, PROFESSIONAL_ID, MONDAY, time(23, 0), None) is True
