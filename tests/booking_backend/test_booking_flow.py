from datetime import date, timedelta

import pytest

from booking_backend.booking_flow import BookingFormData, can_proceed, compute_end_time, to_booking_payload
from booking_backend.core.errors import ValidationError

UPCOMING = (date.today() + timedelta(days=7)).isoformat()


@pytest.fixture
def complete_form() -> BookingFormData:
    return BookingFormData(
        service_id='service-1',
        professional_id='provider-1',
        booking_date=UPCOMING,
        start_time='09:30',
        duration=90,
        service_address='Damrak 1',
        service_city='Amsterdam',
        service_instructions='Key under the mat',
        payment_method='credit_card',
        accept_terms=True,
    )


def test_first_and_details_steps_always_proceed() -> None:
    form = BookingFormData()

    assert can_proceed(1, form) is True
    assert can_proceed(4, form) is True


def test_schedule_step_needs_date_and_start_time() -> None:
    assert can_proceed(2, BookingFormData(booking_date=UPCOMING)) is False
    assert can_proceed(2, BookingFormData(booking_date=UPCOMING, start_time='  ')) is False
    assert can_proceed(2, BookingFormData(booking_date=UPCOMING, start_time='10:00')) is True


def test_schedule_step_rejects_past_or_malformed_dates() -> None:
    yesterday = (date.today() - timedelta(days=1)).isoformat()

    assert can_proceed(2, BookingFormData(booking_date=yesterday, start_time='10:00')) is False
    assert can_proceed(2, BookingFormData(booking_date='05/01/2030', start_time='10:00')) is False
    assert can_proceed(2, BookingFormData(booking_date=date.today().isoformat(), start_time='10:00')) is True


def test_address_step_needs_street_and_city() -> None:
    assert can_proceed(3, BookingFormData(service_address='Damrak 1')) is False
    assert can_proceed(3, BookingFormData(service_address='Damrak 1', service_city='Amsterdam')) is True


def test_recurrence_step_needs_pattern_and_end_only_when_recurring() -> None:
    assert can_proceed(5, BookingFormData()) is True
    assert can_proceed(5, BookingFormData(is_recurring=True, recurring_pattern='weekly')) is False
    assert can_proceed(
        5,
        BookingFormData(is_recurring=True, recurring_pattern='monthly', recurring_end_date=UPCOMING),
    ) is True


def test_payment_step_needs_method_and_terms() -> None:
    assert can_proceed(6, BookingFormData(payment_method='ideal')) is False
    assert can_proceed(6, BookingFormData(accept_terms=True)) is False
    assert can_proceed(6, BookingFormData(payment_method='ideal', accept_terms=True)) is True


def test_unknown_step_never_proceeds() -> None:
    assert can_proceed(7, BookingFormData()) is False


@pytest.mark.parametrize(
    ('start', 'duration', 'expected'),
    [('09:30', 90, '11:00'), ('23:30', 60, '00:30'), ('', 60, None), ('nine', 60, None)],
)
def test_compute_end_time(start, duration, expected) -> None:
    assert compute_end_time(start, duration) == expected


def test_payload_from_complete_form(complete_form) -> None:
    payload = to_booking_payload(complete_form)

    assert payload == {
        'provider_id': 'provider-1',
        'service_id': 'service-1',
        'booking_date': UPCOMING,
        'booking_time': '09:30',
        'duration_hours': 1.5,
        'notes': 'Key under the mat',
        'emergency_booking': False,
    }


def test_payload_requires_terms(complete_form) -> None:
    complete_form.accept_terms = False

    with pytest.raises(ValidationError) as exception_info:
        to_booking_payload(complete_form)

    assert exception_info.value.message == 'You must accept the terms to continue'


def test_payload_reports_first_incomplete_step(complete_form) -> None:
    complete_form.service_city = ''

    with pytest.raises(ValidationError) as exception_info:
        to_booking_payload(complete_form)

    assert exception_info.value.message == 'Booking step 3 is incomplete'
