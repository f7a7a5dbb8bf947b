"""Step validation for the multi-step booking form.

Each step's gate depends only on the current form state and today's date.
Nothing is persisted between steps; the final payload is submitted in one
creation call.
"""

from datetime import date, datetime, timedelta
from typing import Literal

from pydantic import BaseModel

from booking_backend.core.errors import ValidationError
from booking_backend.core.validators import format_clock, parse_clock, parse_iso_date

STEP_SCHEDULE = 2
STEP_ADDRESS = 3
STEP_DETAILS = 4
STEP_RECURRENCE = 5
STEP_PAYMENT = 6
BOOKING_STEPS = (1, STEP_SCHEDULE, STEP_ADDRESS, STEP_DETAILS, STEP_RECURRENCE, STEP_PAYMENT)

RecurringPattern = Literal['weekly', 'bi_weekly', 'monthly']
PaymentMethod = Literal['credit_card', 'ideal', 'bancontact', 'paypal', 'bank_transfer', 'cash']


class BookingFormData(BaseModel):
    service_id: str = ''
    professional_id: str = ''
    booking_date: str = ''
    start_time: str = ''
    end_time: str = ''
    duration: int = 60
    service_address: str = ''
    service_city: str = ''
    service_postal_code: str = ''
    service_instructions: str = ''
    special_requirements: str = ''
    emergency_contact_name: str = ''
    emergency_contact_phone: str = ''
    access_instructions: str = ''
    language_preference: str = 'nl'
    is_recurring: bool = False
    recurring_pattern: RecurringPattern | None = None
    recurring_end_date: str | None = None
    payment_method: PaymentMethod | None = None
    accept_terms: bool = False
    franchise_id: str | None = None


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def _is_upcoming(value: str) -> bool:
    try:
        return parse_iso_date(value) >= date.today()
    except ValueError:
        return False


def can_proceed(step: int, form: BookingFormData) -> bool:
    if step == 1:
        return True
    if step == STEP_SCHEDULE:
        return _is_upcoming(form.booking_date) and _filled(form.start_time)
    if step == STEP_ADDRESS:
        return _filled(form.service_address) and _filled(form.service_city)
    if step == STEP_DETAILS:
        return True
    if step == STEP_RECURRENCE:
        return not form.is_recurring or (form.recurring_pattern is not None and _filled(form.recurring_end_date))
    if step == STEP_PAYMENT:
        return form.payment_method is not None and form.accept_terms
    return False


def compute_end_time(start_time: str, duration_minutes: int) -> str | None:
    """End of a booking as ``HH:MM``, wrapping past midnight like a wall clock."""
    start = parse_clock(start_time)
    if start is None:
        return None

    end = datetime.combine(datetime.min.date(), start) + timedelta(minutes=duration_minutes)
    return format_clock(end.time())


def to_booking_payload(form: BookingFormData) -> dict:
    """Turn a completed form into the body of a booking creation request."""
    if not form.accept_terms:
        raise ValidationError('You must accept the terms to continue')

    for step in BOOKING_STEPS:
        if not can_proceed(step, form):
            raise ValidationError(f'Booking step {step} is incomplete')

    return {
        'provider_id': form.professional_id,
        'service_id': form.service_id,
        'booking_date': form.booking_date,
        'booking_time': form.start_time,
        'duration_hours': form.duration / 60,
        'notes': form.service_instructions or form.special_requirements or '',
        'emergency_booking': False,
    }
