from datetime import date, time

from sqlalchemy import create_engine

from booking_backend.database import OptionalSchema, inspect_optional_schema
from booking_backend.models.availability import ProfessionalAvailability, ProfessionalBlockedDate
from booking_backend.models.booking import Booking
from booking_backend.scheduling.store import SqlAlchemyAvailabilityStore

MONDAY = date(2026, 1, 5)
PROFESSIONAL_ID = '3f2b8c1e-5d4a-4e6b-9c7d-1a2b3c4d5e6f'


def add_booking(db, at, status='pending', day=MONDAY, duration_hours=1.0) -> Booking:
    booking = Booking(
        provider_id=PROFESSIONAL_ID,
        service_id='service-1',
        customer_id='customer-1',
        booking_date=day,
        booking_time=at,
        duration_hours=duration_hours,
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking


def test_list_windows_returns_available_rows_for_weekday(db_session) -> None:
    db_session.add_all([
        ProfessionalAvailability(professional_id=PROFESSIONAL_ID, day_of_week=1, start_time=time(13, 0), end_time=time(17, 0)),
        ProfessionalAvailability(
            professional_id=PROFESSIONAL_ID,
            day_of_week=1,
            start_time=time(8, 0),
            end_time=time(12, 0),
            is_emergency_available=True,
        ),
        ProfessionalAvailability(
            professional_id=PROFESSIONAL_ID,
            day_of_week=1,
            start_time=time(18, 0),
            end_time=time(20, 0),
            is_available=False,
        ),
        ProfessionalAvailability(professional_id=PROFESSIONAL_ID, day_of_week=2, start_time=time(8, 0), end_time=time(9, 0)),
    ])
    db_session.commit()
    store = SqlAlchemyAvailabilityStore(db_session, OptionalSchema())

    windows = store.list_windows(PROFESSIONAL_ID, 1)

    assert [(window.start_time, window.end_time) for window in windows] == [
        (time(8, 0), time(12, 0)),
        (time(13, 0), time(17, 0)),
    ]
    assert windows[0].is_emergency_available is True


def test_list_blocked_ranges_filters_by_date(db_session) -> None:
    db_session.add_all([
        ProfessionalBlockedDate(professional_id=PROFESSIONAL_ID, blocked_date=MONDAY, is_all_day=True),
        ProfessionalBlockedDate(professional_id=PROFESSIONAL_ID, blocked_date=date(2026, 1, 6), is_all_day=True),
    ])
    db_session.commit()
    store = SqlAlchemyAvailabilityStore(db_session, OptionalSchema())

    blocked = store.list_blocked_ranges(PROFESSIONAL_ID, MONDAY)

    assert len(blocked) == 1
    assert blocked[0].is_all_day is True
    assert blocked[0].blocked_date == MONDAY


def test_list_bookings_skips_cancelled_by_default(db_session) -> None:
    add_booking(db_session, time(11, 0))
    add_booking(db_session, time(9, 0), status='confirmed')
    add_booking(db_session, time(10, 0), status='cancelled')
    store = SqlAlchemyAvailabilityStore(db_session, OptionalSchema())

    bookings = store.list_bookings(PROFESSIONAL_ID, MONDAY)

    assert [booking.booking_time for booking in bookings] == [time(9, 0), time(11, 0)]
    assert bookings[0].professional_id == PROFESSIONAL_ID
    assert bookings[0].duration_hours == 1.0


def test_list_bookings_filters_by_status(db_session) -> None:
    add_booking(db_session, time(9, 0), status='completed')
    add_booking(db_session, time(10, 0), status='in_progress')
    store = SqlAlchemyAvailabilityStore(db_session, OptionalSchema())

    bookings = store.list_bookings(PROFESSIONAL_ID, MONDAY, statuses=('in_progress',))

    assert [booking.status for booking in bookings] == ['in_progress']


def test_missing_optional_tables_are_not_queried(db_session) -> None:
    db_session.add(ProfessionalBlockedDate(professional_id=PROFESSIONAL_ID, blocked_date=MONDAY, is_all_day=True))
    db_session.commit()
    store = SqlAlchemyAvailabilityStore(
        db_session,
        OptionalSchema(has_availability_table=False, has_blocked_dates_table=False),
    )

    assert store.list_windows(PROFESSIONAL_ID, 1) == []
    assert store.list_blocked_ranges(PROFESSIONAL_ID, MONDAY) == []


def test_inspect_optional_schema_reports_missing_tables() -> None:
    engine = create_engine('sqlite://')
    Booking.__table__.create(bind=engine)

    schema = inspect_optional_schema(engine)

    assert schema == OptionalSchema(has_availability_table=False, has_blocked_dates_table=False)


def test_inspect_optional_schema_reports_present_tables(db_engine) -> None:
    assert inspect_optional_schema(db_engine) == OptionalSchema()
